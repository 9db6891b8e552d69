"""Keeps the messaging-side actor projection in step with account events."""
from __future__ import annotations

import logging
from datetime import datetime

from messaging_service.application.uow import UnitOfWork
from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus

logger = logging.getLogger(__name__)


async def record_role(actor_id: str, role: Role, uow: UnitOfWork) -> None:
    await uow.actors_w.upsert_role(actor_id, role)
    await uow.commit()
    logger.info("Actor %s role set to %s", actor_id, role)


async def record_subscription(
    actor_id: str,
    status: SubscriptionStatus,
    period_end: datetime | None,
    uow: UnitOfWork,
) -> None:
    await uow.actors_w.upsert_subscription(actor_id, status, period_end)
    await uow.commit()
    logger.info("Actor %s subscription now %s", actor_id, status)
