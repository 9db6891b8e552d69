from __future__ import annotations

from messaging_service.domain.entities.actor import Actor
from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus
from messaging_service.infrastructure.db.models.actor import ActorModel


def model_to_entity(model: ActorModel) -> Actor:
    return Actor(
        id=model.id,
        role=Role(model.role) if model.role else None,
        subscription_status=SubscriptionStatus(model.subscription_status),
        subscription_period_end=model.subscription_period_end,
    )
