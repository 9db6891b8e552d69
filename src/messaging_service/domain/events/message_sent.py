from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

PREVIEW_LENGTH = 100


def make_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    if len(content) <= length:
        return content
    return content[:length] + "..."


@dataclass(frozen=True, slots=True)
class MessageSent:
    message_id: str
    conversation_id: str
    sender_id: str
    recipient_id: str
    preview: str

    event_type: ClassVar[str] = "messaging.message_sent"
