from __future__ import annotations

import uuid

from messaging_service.application.dto.conversation import ConversationPreviewDTO
from messaging_service.application.dto.principal import Principal
from messaging_service.application.policies.permissions import assert_conversation_visible
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import Conversation


async def list_conversations(
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[ConversationPreviewDTO]:
    """Caller's conversations, most recently active first, with previews."""
    conversations = await uow.conversations.list_for_actor(
        principal.actor_id, cursor=cursor, limit=limit,
    )
    ids = [c.id for c in conversations]
    last_messages = await uow.messages.last_messages(ids)
    unread = await uow.messages.unread_counts(ids, principal.actor_id)
    return [
        ConversationPreviewDTO(
            conversation=conversation,
            other_participant_id=conversation.other_participant(principal.actor_id),
            last_message=last_messages.get(conversation.id),
            unread_count=unread.get(conversation.id, 0),
        )
        for conversation in conversations
    ]


async def get_conversation(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Conversation:
    conversation = await uow.conversations.get_by_id(conversation_id)
    assert_conversation_visible(
        principal, conversation.participant_ids if conversation else None,
    )
    return conversation  # type: ignore[return-value]


async def unread_count(principal: Principal, uow: UnitOfWork) -> int:
    return await uow.messages.count_unread_total(principal.actor_id)
