from __future__ import annotations

from typing import Protocol

from messaging_service.application.repositories.actor import ActorReader, ActorWriter
from messaging_service.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from messaging_service.application.repositories.message import MessageReader, MessageWriter
from messaging_service.application.repositories.outbox import OutboxWriter


class UnitOfWork(Protocol):
    actors: ActorReader
    actors_w: ActorWriter
    conversations: ConversationReader
    conversations_w: ConversationWriter
    messages: MessageReader
    messages_w: MessageWriter
    outbox: OutboxWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
