from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus


@dataclass(frozen=True, slots=True)
class Actor:
    """A user identity as seen by messaging: role plus current subscription."""

    id: str
    # None until the registration event has been seen.
    role: Role | None
    subscription_status: SubscriptionStatus = SubscriptionStatus.NONE
    subscription_period_end: datetime | None = None
