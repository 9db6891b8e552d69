from __future__ import annotations

import asyncio
import uuid

import pytest

from messaging_service.application.exceptions import (
    ForbiddenError,
    MessagingDeniedError,
    NotFoundError,
    ValidationError,
)
from messaging_service.domain.entities.message import MESSAGE_MAX_LENGTH
from messaging_service.domain.events.message_sent import PREVIEW_LENGTH
from messaging_service.domain.value_objects.enums import ConversationStage, DenialKind
from messaging_service.services import message_service
from tests.conftest import ADMIN_ID, COMPANY_ID, PRO_ID, TALENT_ID, make_conversation, make_message


@pytest.mark.asyncio
async def test_first_contact_creates_conversation_and_message(uow, pro_principal):
    result = await message_service.send_to_recipient(
        TALENT_ID, pro_principal, "  Hi there  ", None, uow,
    )

    assert result.conversation_created is True
    assert result.message_created is True
    assert result.message.content == "Hi there"
    assert result.conversation.participant_ids == {PRO_ID, TALENT_ID}
    assert result.conversation.initiated_by == PRO_ID
    assert result.conversation.stage == ConversationStage.CONTACT_INITIATED
    assert uow._commits == 1
    assert [r["event_type"] for r in uow.outbox._records] == [
        "messaging.conversation_created",
        "messaging.message_sent",
    ]


@pytest.mark.asyncio
async def test_message_sent_event_carries_recipient_and_preview(uow, pro_principal):
    content = "x" * (PREVIEW_LENGTH + 50)

    await message_service.send_to_recipient(TALENT_ID, pro_principal, content, None, uow)

    payload = uow.outbox._records[-1]["payload"]
    assert payload["recipient_id"] == TALENT_ID
    assert payload["sender_id"] == PRO_ID
    assert payload["preview"] == "x" * PREVIEW_LENGTH + "..."


@pytest.mark.asyncio
async def test_second_send_reuses_conversation(uow, pro_principal):
    first = await message_service.send_to_recipient(TALENT_ID, pro_principal, "one", None, uow)
    second = await message_service.send_to_recipient(TALENT_ID, pro_principal, "two", None, uow)

    assert second.conversation_created is False
    assert second.conversation.id == first.conversation.id
    assert len(uow.conversations._store) == 1
    assert sum(r["event_type"] == "messaging.conversation_created" for r in uow.outbox._records) == 1


@pytest.mark.asyncio
async def test_expired_company_is_denied_without_writes(uow, company_principal):
    with pytest.raises(MessagingDeniedError) as exc_info:
        await message_service.send_to_recipient(TALENT_ID, company_principal, "hi", None, uow)

    assert exc_info.value.decision.requires_subscription is True
    assert exc_info.value.decision.denial == DenialKind.SUBSCRIPTION_REQUIRED
    assert uow.conversations._store == {}
    assert uow.messages._messages == []
    assert uow._committed is False


@pytest.mark.asyncio
async def test_talent_cannot_open_conversation(uow, talent_principal):
    with pytest.raises(MessagingDeniedError) as exc_info:
        await message_service.send_to_recipient("talent-2", talent_principal, "hi", None, uow)

    assert exc_info.value.detail == "Talents cannot initiate contact"


@pytest.mark.asyncio
async def test_talent_can_answer_through_recipient_endpoint(uow, pro_principal, talent_principal):
    await message_service.send_to_recipient(TALENT_ID, pro_principal, "hello", None, uow)

    result = await message_service.send_to_recipient(PRO_ID, talent_principal, "hi!", None, uow)

    assert result.conversation_created is False
    assert result.conversation.stage == ConversationStage.ACTIVE_CONVERSATION


@pytest.mark.asyncio
async def test_cannot_message_yourself(uow, pro_principal):
    with pytest.raises(ValidationError):
        await message_service.send_to_recipient(PRO_ID, pro_principal, "hi", None, uow)


@pytest.mark.asyncio
async def test_unknown_recipient(uow, pro_principal):
    with pytest.raises(NotFoundError):
        await message_service.send_to_recipient("ghost", pro_principal, "hi", None, uow)


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "   ", "x" * (MESSAGE_MAX_LENGTH + 1)])
async def test_content_bounds(uow, pro_principal, content):
    with pytest.raises(ValidationError):
        await message_service.send_to_recipient(TALENT_ID, pro_principal, content, None, uow)
    assert uow.conversations._store == {}


@pytest.mark.asyncio
async def test_max_length_content_is_accepted(uow, pro_principal):
    result = await message_service.send_to_recipient(
        TALENT_ID, pro_principal, "x" * MESSAGE_MAX_LENGTH, None, uow,
    )
    assert len(result.message.content) == MESSAGE_MAX_LENGTH


@pytest.mark.asyncio
async def test_send_is_idempotent_per_client_msg_id(uow, pro_principal):
    client_msg_id = uuid.uuid4()

    first = await message_service.send_to_recipient(TALENT_ID, pro_principal, "hi", client_msg_id, uow)
    uow._committed = False
    again = await message_service.send_to_recipient(TALENT_ID, pro_principal, "hi", client_msg_id, uow)

    assert again.message_created is False
    assert again.message.id == first.message.id
    assert len(uow.messages._messages) == 1
    assert uow._committed is False


@pytest.mark.asyncio
async def test_concurrent_first_contact_converges(uow, pro_principal):
    first, second = await asyncio.gather(
        message_service.send_to_recipient(TALENT_ID, pro_principal, "first", None, uow),
        message_service.send_to_recipient(TALENT_ID, pro_principal, "second", None, uow),
    )

    assert len(uow.conversations._store) == 1
    assert first.conversation.id == second.conversation.id
    assert [first.conversation_created, second.conversation_created] == [True, False]

    conv_id = first.conversation.id
    contents = [m.content for m in await uow.messages.list_messages(conv_id)]
    assert contents == ["first", "second"]


@pytest.mark.asyncio
async def test_reply_by_talent_activates_conversation(uow, talent_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    result = await message_service.reply(conv.id, talent_principal, "thanks!", None, uow)

    assert result.message.sender_id == TALENT_ID
    assert uow.conversations._store[conv.id].stage == ConversationStage.ACTIVE_CONVERSATION
    assert uow.outbox._records[-1]["payload"]["recipient_id"] == PRO_ID


@pytest.mark.asyncio
async def test_initiator_follow_up_keeps_stage(uow, pro_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    await message_service.reply(conv.id, pro_principal, "ping", None, uow)

    assert uow.conversations._store[conv.id].stage == ConversationStage.CONTACT_INITIATED


@pytest.mark.asyncio
async def test_reply_advances_updated_at(uow, talent_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    result = await message_service.reply(conv.id, talent_principal, "hey", None, uow)

    assert uow.conversations._store[conv.id].updated_at == result.message.created_at


@pytest.mark.asyncio
async def test_talent_replies_to_expired_company(uow, talent_principal):
    conv = make_conversation(initiated_by=COMPANY_ID)
    uow.conversations.add(conv)

    result = await message_service.reply(conv.id, talent_principal, "hello", None, uow)

    assert result.message_created is True


@pytest.mark.asyncio
async def test_expired_company_cannot_reply(uow, company_principal):
    conv = make_conversation(initiated_by=COMPANY_ID)
    uow.conversations.add(conv)

    with pytest.raises(MessagingDeniedError) as exc_info:
        await message_service.reply(conv.id, company_principal, "hello", None, uow)

    assert exc_info.value.decision.requires_subscription is True


@pytest.mark.asyncio
async def test_outsider_cannot_reply(uow, admin_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    with pytest.raises(MessagingDeniedError) as exc_info:
        await message_service.reply(conv.id, admin_principal, "hello", None, uow)

    assert exc_info.value.decision.denial == DenialKind.NOT_PARTICIPANT
    assert uow.messages._messages == []


@pytest.mark.asyncio
async def test_reply_to_missing_conversation(uow, pro_principal):
    with pytest.raises(NotFoundError):
        await message_service.reply(uuid.uuid4(), pro_principal, "hello", None, uow)


@pytest.mark.asyncio
async def test_list_messages_for_participant(uow, talent_principal):
    conv = make_conversation()
    uow.conversations.add(conv)
    uow.messages._messages.append(make_message(conversation_id=conv.id))

    messages = await message_service.list_messages(conv.id, talent_principal, None, 50, uow)

    assert len(messages) == 1


@pytest.mark.asyncio
async def test_list_messages_forbidden_for_outsider(uow, company_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    with pytest.raises(ForbiddenError):
        await message_service.list_messages(conv.id, company_principal, None, 50, uow)


@pytest.mark.asyncio
async def test_admin_reads_any_conversation(uow, admin_principal):
    conv = make_conversation()
    uow.conversations.add(conv)
    uow.messages._messages.append(make_message(conversation_id=conv.id))

    messages = await message_service.list_messages(conv.id, admin_principal, None, 50, uow)

    assert [m.sender_id for m in messages] == [PRO_ID]


@pytest.mark.asyncio
async def test_mark_read_only_marks_other_side(uow, talent_principal):
    conv = make_conversation()
    uow.conversations.add(conv)
    uow.messages._messages.extend([
        make_message(conversation_id=conv.id, sender_id=PRO_ID),
        make_message(conversation_id=conv.id, sender_id=PRO_ID),
        make_message(conversation_id=conv.id, sender_id=TALENT_ID),
    ])

    marked = await message_service.mark_read(conv.id, talent_principal, uow)

    assert marked == 2
    assert uow._committed is True
    assert await uow.messages.unread_counts([conv.id], TALENT_ID) == {}
    assert await uow.messages.unread_counts([conv.id], PRO_ID) == {conv.id: 1}


@pytest.mark.asyncio
async def test_mark_read_requires_participation(uow, admin_principal):
    conv = make_conversation()
    uow.conversations.add(conv)

    with pytest.raises(ForbiddenError):
        await message_service.mark_read(conv.id, admin_principal, uow)


@pytest.mark.asyncio
async def test_admin_opens_conversation_with_professional(uow, admin_principal):
    result = await message_service.send_to_recipient(PRO_ID, admin_principal, "hello", None, uow)

    assert result.conversation.initiated_by == ADMIN_ID
    assert result.conversation_created is True
