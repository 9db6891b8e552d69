from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from messaging_service.api.deps import CurrentAdmin, CurrentPrincipal, UoWDep
from messaging_service.api.v1.schemas.common import PaginatedResponse, next_cursor
from messaging_service.api.v1.schemas.conversation import (
    ConversationPreviewResponse,
    ConversationResponse,
    UnreadCountResponse,
)
from messaging_service.api.v1.schemas.message import MessageResponse
from messaging_service.application.dto.conversation import ConversationFilterDTO
from messaging_service.config import settings
from messaging_service.services import admin_service, conversation_service

router = APIRouter(prefix="/api/v1/messaging", tags=["conversations"])


@router.get(
    "/conversations",
    response_model=PaginatedResponse[ConversationPreviewResponse],
)
async def list_conversations(
    principal: CurrentPrincipal,
    uow: UoWDep,
    cursor: str | None = Query(None),
    limit: int = Query(settings.CONVERSATION_PAGE_LIMIT, ge=1, le=100),
) -> PaginatedResponse[ConversationPreviewResponse]:
    previews = await conversation_service.list_conversations(
        principal, cursor, limit, uow,
    )
    items = [
        ConversationPreviewResponse(
            conversation=ConversationResponse.from_entity(p.conversation),
            other_participant_id=p.other_participant_id,
            last_message=(
                MessageResponse.model_validate(p.last_message, from_attributes=True)
                if p.last_message
                else None
            ),
            unread_count=p.unread_count,
        )
        for p in previews
    ]
    return PaginatedResponse[ConversationPreviewResponse](
        items=items,
        next_cursor=next_cursor(
            previews, limit, lambda p: (p.conversation.updated_at, p.conversation.id),
        ),
    )


@router.get("/conversations/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> ConversationResponse:
    conv = await conversation_service.get_conversation(conversation_id, principal, uow)
    return ConversationResponse.from_entity(conv)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> UnreadCountResponse:
    count = await conversation_service.unread_count(principal, uow)
    return UnreadCountResponse(unread_count=count)


@router.get(
    "/admin/conversations",
    response_model=PaginatedResponse[ConversationResponse],
    tags=["admin"],
)
async def admin_list_conversations(
    admin: CurrentAdmin,
    uow: UoWDep,
    participant_id: str | None = Query(None),
    cursor: str | None = Query(None),
    limit: int = Query(settings.CONVERSATION_PAGE_LIMIT, ge=1, le=100),
) -> PaginatedResponse[ConversationResponse]:
    filters = ConversationFilterDTO(
        participant_id=participant_id,
        cursor=cursor,
        limit=limit,
    )
    convs = await admin_service.list_conversations(filters, admin, uow)
    return PaginatedResponse[ConversationResponse](
        items=[ConversationResponse.from_entity(c) for c in convs],
        next_cursor=next_cursor(convs, limit, lambda c: (c.updated_at, c.id)),
    )
