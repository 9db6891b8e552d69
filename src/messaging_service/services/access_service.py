from __future__ import annotations

import logging

from messaging_service.application.dto.access import AccessCheckDTO
from messaging_service.application.dto.principal import Principal
from messaging_service.application.exceptions import (
    MessagingDeniedError,
    NotFoundError,
    ValidationError,
)
from messaging_service.application.policies.messaging_access import (
    AccessDecision,
    build_actor,
    can_initiate_contact,
    can_reply_to_conversation,
)
from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.entities.actor import Actor

logger = logging.getLogger(__name__)


async def load_actor(principal: Principal, uow: UnitOfWork) -> Actor:
    """Caller role comes from the token, subscription status from the store."""
    stored = await uow.actors.get_by_id(principal.actor_id)
    return build_actor(
        principal.actor_id,
        principal.role,
        stored.subscription_status if stored else None,
    )


async def check_recipient(
    principal: Principal,
    recipient_id: str,
    uow: UnitOfWork,
) -> tuple[Actor, AccessCheckDTO]:
    """Evaluate whether the caller may message ``recipient_id``.

    An existing conversation between the two is judged by the reply rules,
    otherwise by the contact-initiation rules.
    """
    if principal.actor_id == recipient_id:
        raise ValidationError("You cannot message yourself")

    recipient = await uow.actors.get_by_id(recipient_id)
    if recipient is None or recipient.role is None:
        raise NotFoundError("Recipient not found")

    actor = await load_actor(principal, uow)
    existing = await uow.conversations.get_between(actor.id, recipient.id)
    if existing is not None:
        decision = can_reply_to_conversation(actor, existing.has_participant(actor.id))
    else:
        decision = can_initiate_contact(actor, recipient.id, recipient.role)
    return actor, AccessCheckDTO(decision=decision, conversation=existing)


async def check_can_message(
    principal: Principal,
    recipient_id: str,
    uow: UnitOfWork,
) -> AccessCheckDTO:
    _actor, check = await check_recipient(principal, recipient_id, uow)
    return check


def raise_if_denied(actor: Actor, decision: AccessDecision) -> None:
    if decision.can_send:
        if decision.in_grace_period:
            logger.info("Actor %s messaging during subscription grace period", actor.id)
        return
    logger.info(
        "Messaging denied for %s (%s, %s): %s",
        actor.id,
        actor.role,
        decision.denial,
        decision.reason,
    )
    raise MessagingDeniedError(decision)
