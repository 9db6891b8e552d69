from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from messaging_service.domain.value_objects.enums import ConversationStage, DenialKind


class AccessDecisionResponse(BaseModel):
    can_send: bool
    requires_subscription: bool
    reason: str | None
    denial: DenialKind | None
    in_grace_period: bool
    conversation_id: UUID | None = None
    stage: ConversationStage
