from __future__ import annotations

from messaging_service.domain.entities.message import Message
from messaging_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        content=model.content,
        client_msg_id=model.client_msg_id,
        created_at=model.created_at,
        read_at=model.read_at,
    )


def entity_to_values(entity: Message) -> dict:
    return {
        "id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "content": entity.content,
        "client_msg_id": entity.client_msg_id,
        "created_at": entity.created_at,
        "read_at": entity.read_at,
    }
