"""Create all tables on an empty database (development only)."""
from __future__ import annotations

import asyncio
import logging

from messaging_service.config import settings
from messaging_service.infrastructure.db import models  # noqa: F401
from messaging_service.infrastructure.db.base import Base
from messaging_service.infrastructure.db.session import engine
from messaging_service.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    logger.info("Created tables: %s", ", ".join(sorted(Base.metadata.tables)))


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(init_db())


if __name__ == "__main__":
    main()
