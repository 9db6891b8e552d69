from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    content: str
    client_msg_id: UUID | None = None


class StartConversationRequest(SendMessageRequest):
    recipient_id: str = Field(min_length=1, max_length=64)


class MessageResponse(BaseModel):
    id: UUID
    conversation_id: UUID
    sender_id: str
    content: str
    client_msg_id: UUID
    created_at: datetime
    read_at: datetime | None

    model_config = {"from_attributes": True}


class SendMessageResponse(BaseModel):
    message: MessageResponse
    conversation_id: UUID
    conversation_created: bool


class MarkReadResponse(BaseModel):
    marked: int
