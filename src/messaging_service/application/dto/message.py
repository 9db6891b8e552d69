from __future__ import annotations

from dataclasses import dataclass

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class SendMessageResultDTO:
    message: Message
    conversation: Conversation
    conversation_created: bool
    message_created: bool
