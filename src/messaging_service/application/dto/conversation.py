from __future__ import annotations

from dataclasses import dataclass

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class ConversationFilterDTO:
    participant_id: str | None = None
    cursor: str | None = None
    limit: int = 20


@dataclass(frozen=True, slots=True)
class ConversationPreviewDTO:
    conversation: Conversation
    other_participant_id: str
    last_message: Message | None
    unread_count: int
