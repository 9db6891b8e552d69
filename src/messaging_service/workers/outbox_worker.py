"""Outbox worker: polls pending outbox records, publishes via Redis Pub/Sub."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis

from messaging_service.application.ports.bus import EventPublisher
from messaging_service.application.uow import UnitOfWork
from messaging_service.config import settings
from messaging_service.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from messaging_service.infrastructure.db.session import AsyncSessionLocal
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.logging_config import configure_logging

logger = logging.getLogger(__name__)

BASE_DELAY_SECONDS = 5
MAX_DELAY_SECONDS = 300


def calc_backoff(attempts: int, now: datetime | None = None) -> datetime:
    delay = min(BASE_DELAY_SECONDS * (2 ** attempts), MAX_DELAY_SECONDS)
    return (now or datetime.now(timezone.utc)) + timedelta(seconds=delay)


async def run_outbox_worker() -> None:
    redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    publisher = RedisPubSubPublisher(redis)

    logger.info(
        "Outbox worker started (poll=%.1fs, batch=%d, max_attempts=%d)",
        settings.OUTBOX_POLL_INTERVAL,
        settings.OUTBOX_BATCH_SIZE,
        settings.OUTBOX_MAX_ATTEMPTS,
    )

    try:
        while True:
            try:
                async with AsyncSessionLocal() as session:
                    await process_batch(SqlAlchemyUoW(session), publisher)
            except Exception:
                logger.exception("Outbox worker loop error")
            await asyncio.sleep(settings.OUTBOX_POLL_INTERVAL)
    finally:
        await redis.aclose()


async def process_batch(uow: UnitOfWork, publisher: EventPublisher) -> int:
    """Publish one batch of pending records. Returns how many were sent."""
    batch = await uow.outbox.fetch_pending(settings.OUTBOX_BATCH_SIZE)
    if not batch:
        return 0

    sent_ids: list[int] = []
    for record in batch:
        if record.attempts >= settings.OUTBOX_MAX_ATTEMPTS:
            logger.warning("Outbox record %d exceeded max attempts, giving up", record.id)
            await uow.outbox.mark_dead(record.id, "max attempts exceeded")
            continue
        try:
            await publisher.publish(
                settings.MESSAGING_EVENTS_CHANNEL, record.event_type, record.payload,
            )
            sent_ids.append(record.id)
        except Exception as exc:
            logger.exception("Failed to publish outbox record %d", record.id)
            await uow.outbox.mark_failed(
                record.id, calc_backoff(record.attempts), error=repr(exc),
            )

    if sent_ids:
        await uow.outbox.mark_sent(sent_ids)

    await uow.commit()
    if sent_ids:
        logger.info("Published %d outbox records", len(sent_ids))
    return len(sent_ids)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(run_outbox_worker())


if __name__ == "__main__":
    main()
