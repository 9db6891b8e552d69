from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from messaging_service.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(
        self,
        conversation_id: UUID,
        *,
        cursor: str | None = None,
        limit: int = 50,
    ) -> list[Message]: ...

    async def last_messages(self, conversation_ids: Sequence[UUID]) -> dict[UUID, Message]:
        """Newest message per conversation; conversations without messages are absent."""
        ...

    async def unread_counts(
        self, conversation_ids: Sequence[UUID], reader_id: str
    ) -> dict[UUID, int]:
        """Unread count per conversation for reader; zero counts are absent."""
        ...

    async def count_unread_total(self, reader_id: str) -> int:
        """Unread messages addressed to reader across all their conversations."""
        ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If conflict on client_msg_id → return existing."""
        ...

    async def get_by_client_msg_id(
        self,
        conversation_id: UUID,
        sender_id: str,
        client_msg_id: UUID,
    ) -> Message | None: ...

    async def mark_read(
        self, conversation_id: UUID, reader_id: str, ts: datetime
    ) -> int:
        """Set read_at on the other side's unread messages. Return count marked."""
        ...
