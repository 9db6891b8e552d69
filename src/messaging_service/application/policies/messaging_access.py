"""Messaging access rules.

Pure functions over plain data: no I/O, no shared state. Callers load the
facts (actor role, subscription status, participation) and act on the
returned decision; a denial is a value, never an exception.

The policy itself lives in the two tables below. ``_ROLE_GATES`` says, per
role, how initiating and replying are gated; ``_MESSAGING_STATUSES`` says
which subscription states open a SUBSCRIPTION gate.
"""
from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum

from messaging_service.domain.entities.actor import Actor
from messaging_service.domain.value_objects.enums import DenialKind, Role, SubscriptionStatus

TALENT_CANNOT_INITIATE = "Talents cannot initiate contact"
RECIPIENT_NOT_TALENT = "You can only message talents"
SUBSCRIPTION_REQUIRED = "An active subscription is required to contact talents."
NOT_PARTICIPANT = "You are not a participant in this conversation."
ROLE_CANNOT_SEND = "Your account type cannot send messages"


class Gate(Enum):
    ALWAYS = "always"
    NEVER = "never"
    SUBSCRIPTION = "subscription"


@dataclass(frozen=True, slots=True)
class RoleGates:
    initiate: Gate
    reply: Gate


_ROLE_GATES: dict[Role, RoleGates] = {
    Role.ADMIN: RoleGates(initiate=Gate.ALWAYS, reply=Gate.ALWAYS),
    Role.TALENT: RoleGates(initiate=Gate.NEVER, reply=Gate.ALWAYS),
    Role.PROFESSIONAL: RoleGates(initiate=Gate.SUBSCRIPTION, reply=Gate.SUBSCRIPTION),
    Role.COMPANY: RoleGates(initiate=Gate.SUBSCRIPTION, reply=Gate.SUBSCRIPTION),
}

# PAST_DUE is the grace period: payment failed but access continues.
_MESSAGING_STATUSES: dict[SubscriptionStatus, bool] = {
    SubscriptionStatus.ACTIVE: True,
    SubscriptionStatus.TRIAL: True,
    SubscriptionStatus.PAST_DUE: True,
    SubscriptionStatus.CANCELLED: False,
    SubscriptionStatus.EXPIRED: False,
    SubscriptionStatus.NONE: False,
}

_MESSAGEABLE_ROLES: frozenset[Role] = frozenset({Role.TALENT})


@dataclass(frozen=True, slots=True)
class AccessDecision:
    can_send: bool
    requires_subscription: bool = False
    reason: str | None = None
    denial: DenialKind | None = None
    in_grace_period: bool = False

    @classmethod
    def allow(cls, *, in_grace_period: bool = False) -> AccessDecision:
        return cls(can_send=True, in_grace_period=in_grace_period)

    @classmethod
    def deny(
        cls,
        denial: DenialKind,
        reason: str,
        *,
        requires_subscription: bool = False,
    ) -> AccessDecision:
        return cls(
            can_send=False,
            requires_subscription=requires_subscription,
            reason=reason,
            denial=denial,
        )


def has_messaging_subscription(status: SubscriptionStatus) -> bool:
    return _MESSAGING_STATUSES[status]


def is_in_grace_period(status: SubscriptionStatus) -> bool:
    return status == SubscriptionStatus.PAST_DUE


def _subscription_decision(actor: Actor) -> AccessDecision:
    if not has_messaging_subscription(actor.subscription_status):
        return AccessDecision.deny(
            DenialKind.SUBSCRIPTION_REQUIRED,
            SUBSCRIPTION_REQUIRED,
            requires_subscription=True,
        )
    return AccessDecision.allow(in_grace_period=is_in_grace_period(actor.subscription_status))


def can_initiate_contact(
    actor: Actor,
    target_talent_id: str,
    target_role: Role = Role.TALENT,
) -> AccessDecision:
    """Decide whether ``actor`` may open a new conversation with a talent."""
    gate = _ROLE_GATES[actor.role].initiate
    if gate is Gate.ALWAYS:
        return AccessDecision.allow()
    if gate is Gate.NEVER:
        return AccessDecision.deny(DenialKind.ROLE_FORBIDDEN, TALENT_CANNOT_INITIATE)
    if target_role not in _MESSAGEABLE_ROLES:
        return AccessDecision.deny(DenialKind.RECIPIENT_NOT_MESSAGEABLE, RECIPIENT_NOT_TALENT)
    return _subscription_decision(actor)


def can_reply_to_conversation(actor: Actor, is_participant: bool) -> AccessDecision:
    """Decide whether ``actor`` may post into an existing conversation.

    Participation is checked before anything else, so no role or
    subscription state lets an outsider write into someone else's thread.
    """
    if not is_participant:
        return AccessDecision.deny(DenialKind.NOT_PARTICIPANT, NOT_PARTICIPANT)

    gate = _ROLE_GATES[actor.role].reply
    if gate is Gate.ALWAYS:
        return AccessDecision.allow()
    if gate is Gate.NEVER:
        return AccessDecision.deny(DenialKind.ROLE_FORBIDDEN, ROLE_CANNOT_SEND)
    return _subscription_decision(actor)


def can_view_conversation(
    actor_id: str,
    participant_ids: Collection[str],
    actor_role: Role,
) -> bool:
    # Subscription never widens visibility: only the pair itself and admins.
    return actor_role == Role.ADMIN or actor_id in participant_ids


def build_actor(
    actor_id: str,
    role: Role,
    subscription_status: SubscriptionStatus | None = None,
) -> Actor:
    return Actor(
        id=actor_id,
        role=role,
        subscription_status=subscription_status or SubscriptionStatus.NONE,
    )
