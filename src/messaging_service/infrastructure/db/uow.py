from __future__ import annotations

import contextlib
from types import TracebackType
from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.infrastructure.db.errors import (
    STORE_ERRORS,
    as_store_unavailable,
    is_store_error,
)
from messaging_service.infrastructure.db.repositories.actor import (
    ActorReaderRepo,
    ActorWriterRepo,
)
from messaging_service.infrastructure.db.repositories.conversation import (
    ConversationReaderRepo,
    ConversationWriterRepo,
)
from messaging_service.infrastructure.db.repositories.message import (
    MessageReaderRepo,
    MessageWriterRepo,
)
from messaging_service.infrastructure.db.repositories.outbox import OutboxWriterRepo


class SqlAlchemyUoW:
    """Concrete Unit-of-Work backed by a single AsyncSession.

    Everything written between two commits lands atomically; a first message
    and the conversation it opens are never visible one without the other.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.actors = ActorReaderRepo(session)
        self.actors_w = ActorWriterRepo(session)
        self.conversations = ConversationReaderRepo(session)
        self.conversations_w = ConversationWriterRepo(session)
        self.messages = MessageReaderRepo(session)
        self.messages_w = MessageWriterRepo(session)
        self.outbox = OutboxWriterRepo(session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_val is None:
            return
        if not is_store_error(exc_val):
            await self.rollback()
            return
        # The connection may already be gone; the rollback is best effort.
        with contextlib.suppress(*STORE_ERRORS):
            await self.rollback()
        raise as_store_unavailable(exc_val) from exc_val
