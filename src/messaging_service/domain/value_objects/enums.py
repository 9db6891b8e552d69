from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    TALENT = "TALENT"
    PROFESSIONAL = "PROFESSIONAL"
    COMPANY = "COMPANY"
    ADMIN = "ADMIN"


class SubscriptionStatus(StrEnum):
    ACTIVE = "ACTIVE"
    TRIAL = "TRIAL"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
    NONE = "NONE"


class ConversationStage(StrEnum):
    NO_RELATIONSHIP = "no_relationship"
    CONTACT_INITIATED = "contact_initiated"
    ACTIVE_CONVERSATION = "active_conversation"


class DenialKind(StrEnum):
    NOT_PARTICIPANT = "not_participant"
    ROLE_FORBIDDEN = "role_forbidden"
    RECIPIENT_NOT_MESSAGEABLE = "recipient_not_messageable"
    SUBSCRIPTION_REQUIRED = "subscription_required"


# Billing processor status -> local status. "unpaid" keeps grace-period access.
BILLING_STATUS_MAP: dict[str, SubscriptionStatus] = {
    "active": SubscriptionStatus.ACTIVE,
    "trialing": SubscriptionStatus.TRIAL,
    "past_due": SubscriptionStatus.PAST_DUE,
    "unpaid": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELLED,
    "paused": SubscriptionStatus.CANCELLED,
    "incomplete": SubscriptionStatus.NONE,
    "incomplete_expired": SubscriptionStatus.EXPIRED,
}


def parse_subscription_status(raw: str | None) -> SubscriptionStatus:
    """Accept either a local status value or a billing processor status."""
    if not raw:
        return SubscriptionStatus.NONE
    if raw in SubscriptionStatus.__members__:
        return SubscriptionStatus(raw)
    return BILLING_STATUS_MAP.get(raw.lower(), SubscriptionStatus.NONE)
