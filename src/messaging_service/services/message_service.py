from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from messaging_service.application.dto.message import SendMessageResultDTO
from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import NotFoundError, ValidationError
from messaging_service.application.policies.messaging_access import can_reply_to_conversation
from messaging_service.application.policies.permissions import (
    assert_conversation_visible,
    assert_participant,
)
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.conversation import Conversation, ordered_pair
from messaging_service.domain.entities.message import (
    MESSAGE_MAX_LENGTH,
    MESSAGE_MIN_LENGTH,
    Message,
)
from messaging_service.domain.events.conversation_created import ConversationCreated
from messaging_service.domain.events.message_sent import MessageSent, make_preview
from messaging_service.domain.value_objects.enums import ConversationStage
from messaging_service.services.access_service import (
    check_recipient,
    load_actor,
    raise_if_denied,
)

logger = logging.getLogger(__name__)


def normalize_content(content: str) -> str:
    text = content.strip()
    if len(text) < MESSAGE_MIN_LENGTH:
        raise ValidationError("Message cannot be empty")
    if len(text) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"Message cannot exceed {MESSAGE_MAX_LENGTH} characters")
    return text


async def send_to_recipient(
    recipient_id: str,
    principal: Principal,
    content: str,
    client_msg_id: uuid.UUID | None,
    uow: UnitOfWork,
) -> SendMessageResultDTO:
    """Send a message to another actor, opening the conversation if needed.

    A pair with no conversation yet is judged by the contact-initiation
    rules; the conversation row and the first message are committed together.
    Two first contacts racing on the same pair end up in one conversation.
    """
    text = normalize_content(content)
    actor, check = await check_recipient(principal, recipient_id, uow)
    raise_if_denied(actor, check.decision)

    conversation = check.conversation
    conversation_created = False
    if conversation is None:
        now = datetime.now(timezone.utc)
        low, high = ordered_pair(actor.id, recipient_id)
        conversation, conversation_created = await uow.conversations_w.create_or_get(
            Conversation(
                id=uuid.uuid4(),
                participant_low=low,
                participant_high=high,
                initiated_by=actor.id,
                stage=ConversationStage.CONTACT_INITIATED,
                created_at=now,
                updated_at=now,
            )
        )
        if not conversation_created:
            logger.info(
                "Concurrent first contact between %s and %s joined conversation %s",
                actor.id, recipient_id, conversation.id,
            )

    return await _append_message(
        conversation, actor.id, text, client_msg_id, conversation_created, uow,
    )


async def reply(
    conversation_id: uuid.UUID,
    principal: Principal,
    content: str,
    client_msg_id: uuid.UUID | None,
    uow: UnitOfWork,
) -> SendMessageResultDTO:
    text = normalize_content(content)
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")

    actor = await load_actor(principal, uow)
    is_participant = await uow.conversations.is_participant(conversation_id, actor.id)
    raise_if_denied(actor, can_reply_to_conversation(actor, is_participant))

    return await _append_message(conversation, actor.id, text, client_msg_id, False, uow)


async def _append_message(
    conversation: Conversation,
    sender_id: str,
    content: str,
    client_msg_id: uuid.UUID | None,
    conversation_created: bool,
    uow: UnitOfWork,
) -> SendMessageResultDTO:
    msg = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender_id,
        content=content,
        client_msg_id=client_msg_id or uuid.uuid4(),
        created_at=datetime.now(timezone.utc),
    )
    msg, created = await uow.messages_w.create_if_not_exists(msg)

    if created:
        await uow.conversations_w.touch_updated_at(conversation.id, msg.created_at)
        stage = conversation.stage_after_message_from(sender_id)
        if stage != conversation.stage:
            await uow.conversations_w.set_stage(conversation.id, stage)
            logger.info("Conversation %s is now %s", conversation.id, stage)

        recipient_id = conversation.other_participant(sender_id)
        if conversation_created:
            await uow.outbox.add_event(
                ConversationCreated(
                    conversation_id=str(conversation.id),
                    initiated_by=sender_id,
                    recipient_id=recipient_id,
                )
            )
        await uow.outbox.add_event(
            MessageSent(
                message_id=str(msg.id),
                conversation_id=str(conversation.id),
                sender_id=sender_id,
                recipient_id=recipient_id,
                preview=make_preview(msg.content),
            )
        )
        await uow.commit()
        logger.info("Message %s sent in conversation %s", msg.id, conversation.id)

        updated = await uow.conversations.get_by_id(conversation.id)
        if updated is not None:
            conversation = updated

    return SendMessageResultDTO(
        message=msg,
        conversation=conversation,
        conversation_created=conversation_created,
        message_created=created,
    )


async def list_messages(
    conversation_id: uuid.UUID,
    principal: Principal,
    cursor: str | None,
    limit: int,
    uow: UnitOfWork,
) -> list[Message]:
    participant_ids = await uow.conversations.participant_ids(conversation_id)
    assert_conversation_visible(principal, participant_ids)
    return await uow.messages.list_messages(
        conversation_id, cursor=cursor, limit=limit,
    )


async def mark_read(
    conversation_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> int:
    """Mark the other participant's messages read. Returns how many changed."""
    conversation = await uow.conversations.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundError("Conversation not found")
    assert_participant(conversation.has_participant(principal.actor_id))

    marked = await uow.messages_w.mark_read(
        conversation_id, principal.actor_id, datetime.now(timezone.utc),
    )
    if marked:
        await uow.commit()
    return marked
