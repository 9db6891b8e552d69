from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class ConversationCreated:
    conversation_id: str
    initiated_by: str
    recipient_id: str

    event_type: ClassVar[str] = "messaging.conversation_created"
