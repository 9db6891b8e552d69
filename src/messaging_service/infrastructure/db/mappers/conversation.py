from __future__ import annotations

from messaging_service.domain.entities.conversation import Conversation
from messaging_service.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.id,
        participant_low=model.participant_low,
        participant_high=model.participant_high,
        initiated_by=model.initiated_by,
        stage=model.stage,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def entity_to_values(entity: Conversation) -> dict:
    return {
        "id": entity.id,
        "participant_low": entity.participant_low,
        "participant_high": entity.participant_high,
        "initiated_by": entity.initiated_by,
        "stage": entity.stage,
        "created_at": entity.created_at,
        "updated_at": entity.updated_at,
    }
