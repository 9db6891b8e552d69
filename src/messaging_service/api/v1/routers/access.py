from __future__ import annotations

from fastapi import APIRouter

from messaging_service.api.deps import CurrentPrincipal, UoWDep
from messaging_service.api.v1.schemas.access import AccessDecisionResponse
from messaging_service.services import access_service

router = APIRouter(prefix="/api/v1/messaging/access", tags=["access"])


@router.get("/{recipient_id}", response_model=AccessDecisionResponse)
async def check_can_message(
    recipient_id: str,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> AccessDecisionResponse:
    """Whether the caller may message ``recipient_id`` right now, and why not."""
    check = await access_service.check_can_message(principal, recipient_id, uow)
    decision = check.decision
    return AccessDecisionResponse(
        can_send=decision.can_send,
        requires_subscription=decision.requires_subscription,
        reason=decision.reason,
        denial=decision.denial,
        in_grace_period=decision.in_grace_period,
        conversation_id=check.conversation.id if check.conversation else None,
        stage=check.stage,
    )
