from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

MESSAGE_MIN_LENGTH = 1
MESSAGE_MAX_LENGTH = 5000


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: str
    content: str
    client_msg_id: UUID
    created_at: datetime
    read_at: datetime | None = None
