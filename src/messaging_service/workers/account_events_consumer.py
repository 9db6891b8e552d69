"""Consumer for account and billing events via Redis Streams.

Keeps the ``actors`` table current: role changes from the account service,
subscription status changes from billing.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

import redis.asyncio as aioredis

from messaging_service.application.uow import UnitOfWork
from messaging_service.config import settings
from messaging_service.domain.value_objects.enums import Role, parse_subscription_status
from messaging_service.infrastructure.bus.redis_streams import RedisStreamConsumer
from messaging_service.infrastructure.db.session import AsyncSessionLocal
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.logging_config import configure_logging
from messaging_service.services import actor_service

logger = logging.getLogger(__name__)

ROLE_EVENTS = frozenset({"actor.registered", "actor.updated"})
SUBSCRIPTION_EVENTS = frozenset({"subscription.updated"})


async def handle_event(event_type: str, fields: dict[str, Any], uow: UnitOfWork) -> None:
    """Apply one stream event. Malformed payloads raise and stay un-acked."""
    if event_type in ROLE_EVENTS:
        await actor_service.record_role(
            fields["actor_id"], Role(fields["role"].upper()), uow,
        )
    elif event_type in SUBSCRIPTION_EVENTS:
        period_end_raw = fields.get("current_period_end")
        await actor_service.record_subscription(
            fields["actor_id"],
            parse_subscription_status(fields.get("status")),
            datetime.fromisoformat(period_end_raw) if period_end_raw else None,
            uow,
        )
    else:
        logger.debug("Ignoring unknown event: %s", event_type)


async def _dispatch(event_type: str, fields: dict[str, Any]) -> None:
    async with AsyncSessionLocal() as session, SqlAlchemyUoW(session) as uow:
        await handle_event(event_type, fields, uow)


async def run_consumer() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    consumer = RedisStreamConsumer(
        redis=redis,
        stream=settings.ACCOUNT_EVENTS_STREAM,
        group=settings.ACCOUNT_EVENTS_GROUP,
        consumer=settings.ACCOUNT_EVENTS_CONSUMER,
        callback=_dispatch,
        max_deliveries=settings.ACCOUNT_EVENTS_MAX_DELIVERIES,
    )
    await consumer.start()
    logger.info("Account events consumer started (%s)", settings.ACCOUNT_EVENTS_CONSUMER)

    try:
        while True:
            await asyncio.sleep(3600)
    except asyncio.CancelledError:
        pass
    finally:
        await consumer.stop()
        await redis.aclose()


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(run_consumer())


if __name__ == "__main__":
    main()
