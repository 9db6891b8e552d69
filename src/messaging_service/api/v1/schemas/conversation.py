from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from messaging_service.api.v1.schemas.message import MessageResponse
from messaging_service.domain.entities.conversation import Conversation
from messaging_service.domain.value_objects.enums import ConversationStage


class ConversationResponse(BaseModel):
    id: UUID
    participant_ids: list[str]
    initiated_by: str
    stage: ConversationStage
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @classmethod
    def from_entity(cls, conversation: Conversation) -> ConversationResponse:
        return cls(
            id=conversation.id,
            participant_ids=sorted(conversation.participant_ids),
            initiated_by=conversation.initiated_by,
            stage=conversation.stage,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )


class ConversationPreviewResponse(BaseModel):
    conversation: ConversationResponse
    other_participant_id: str
    last_message: MessageResponse | None
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int
