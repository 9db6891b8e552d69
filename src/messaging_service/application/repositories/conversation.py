from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from messaging_service.application.dto.conversation import ConversationFilterDTO
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.value_objects.enums import ConversationStage


class ConversationReader(Protocol):
    async def get_by_id(self, conversation_id: UUID) -> Conversation | None: ...

    async def get_between(self, actor_a: str, actor_b: str) -> Conversation | None:
        """Find the conversation for an unordered pair of actors."""
        ...

    async def is_participant(self, conversation_id: UUID, actor_id: str) -> bool: ...

    async def participant_ids(self, conversation_id: UUID) -> frozenset[str] | None: ...

    async def list_for_actor(
        self, actor_id: str, *, cursor: str | None = None, limit: int = 20
    ) -> list[Conversation]: ...

    async def list_for_admin(
        self, filters: ConversationFilterDTO
    ) -> list[Conversation]: ...


class ConversationWriter(Protocol):
    async def create_or_get(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert conversation. Return (conversation, created).

        If the participant pair already has a conversation (including one
        committed concurrently) the existing row is returned with created=False.
        """
        ...

    async def touch_updated_at(
        self, conversation_id: UUID, ts: datetime
    ) -> None: ...

    async def set_stage(
        self, conversation_id: UUID, stage: ConversationStage
    ) -> None: ...
