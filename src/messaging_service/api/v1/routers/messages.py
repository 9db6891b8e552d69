from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from messaging_service.api.deps import CurrentPrincipal, UoWDep
from messaging_service.api.v1.schemas.common import PaginatedResponse, next_cursor
from messaging_service.api.v1.schemas.message import (
    MarkReadResponse,
    MessageResponse,
    SendMessageRequest,
    SendMessageResponse,
    StartConversationRequest,
)
from messaging_service.application.dto.message import SendMessageResultDTO
from messaging_service.config import settings
from messaging_service.services import message_service

router = APIRouter(prefix="/api/v1/messaging", tags=["messages"])


def _send_response(result: SendMessageResultDTO) -> SendMessageResponse:
    return SendMessageResponse(
        message=MessageResponse.model_validate(result.message, from_attributes=True),
        conversation_id=result.conversation.id,
        conversation_created=result.conversation_created,
    )


@router.post("/messages", response_model=SendMessageResponse, status_code=201)
async def send_to_recipient(
    body: StartConversationRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> SendMessageResponse:
    result = await message_service.send_to_recipient(
        body.recipient_id, principal, body.content, body.client_msg_id, uow,
    )
    return _send_response(result)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=PaginatedResponse[MessageResponse],
)
async def list_messages(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(settings.MESSAGE_PAGE_LIMIT, ge=1, le=200),
) -> PaginatedResponse[MessageResponse]:
    messages = await message_service.list_messages(
        conversation_id, principal, cursor, limit, uow,
    )
    return PaginatedResponse[MessageResponse](
        items=[MessageResponse.model_validate(m, from_attributes=True) for m in messages],
        next_cursor=next_cursor(messages, limit, lambda m: (m.created_at, m.id)),
    )


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=SendMessageResponse,
    status_code=201,
)
async def reply(
    conversation_id: UUID,
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> SendMessageResponse:
    result = await message_service.reply(
        conversation_id, principal, body.content, body.client_msg_id, uow,
    )
    return _send_response(result)


@router.post("/conversations/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_read(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MarkReadResponse:
    marked = await message_service.mark_read(conversation_id, principal, uow)
    return MarkReadResponse(marked=marked)
