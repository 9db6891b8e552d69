"""One-time script: create the Redis Streams consumer group for account events."""
from __future__ import annotations

import asyncio
import logging

import redis.asyncio as aioredis

from messaging_service.config import settings
from messaging_service.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def create_group() -> None:
    r = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await r.xgroup_create(
            settings.ACCOUNT_EVENTS_STREAM,
            settings.ACCOUNT_EVENTS_GROUP,
            id="0",
            mkstream=True,
        )
        logger.info(
            "Created consumer group '%s' on stream '%s'",
            settings.ACCOUNT_EVENTS_GROUP,
            settings.ACCOUNT_EVENTS_STREAM,
        )
    except aioredis.ResponseError as e:
        if "BUSYGROUP" in str(e):
            logger.info("Consumer group '%s' already exists", settings.ACCOUNT_EVENTS_GROUP)
        else:
            raise
    finally:
        await r.aclose()


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(create_group())


if __name__ == "__main__":
    main()
