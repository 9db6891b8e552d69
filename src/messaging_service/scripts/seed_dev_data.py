"""Seed development data: actors for every role and one talent conversation."""
from __future__ import annotations

import asyncio
import logging

from messaging_service.application.dto.principal import Principal
from messaging_service.config import settings
from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus
from messaging_service.infrastructure.db.session import AsyncSessionLocal
from messaging_service.infrastructure.db.uow import SqlAlchemyUoW
from messaging_service.logging_config import configure_logging
from messaging_service.services import actor_service, message_service

logger = logging.getLogger(__name__)

ACTORS: list[tuple[str, Role, SubscriptionStatus]] = [
    ("talent-1", Role.TALENT, SubscriptionStatus.NONE),
    ("talent-2", Role.TALENT, SubscriptionStatus.NONE),
    ("pro-active", Role.PROFESSIONAL, SubscriptionStatus.ACTIVE),
    ("pro-lapsed", Role.PROFESSIONAL, SubscriptionStatus.EXPIRED),
    ("company-trial", Role.COMPANY, SubscriptionStatus.TRIAL),
    ("admin-1", Role.ADMIN, SubscriptionStatus.NONE),
]


async def seed() -> None:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        for actor_id, role, status in ACTORS:
            await actor_service.record_role(actor_id, role, uow)
            await actor_service.record_subscription(actor_id, status, None, uow)

        pro = Principal(actor_id="pro-active", role=Role.PROFESSIONAL)
        talent = Principal(actor_id="talent-1", role=Role.TALENT)
        first = await message_service.send_to_recipient(
            "talent-1", pro, "Hi! I saw your portfolio, are you available in May?", None, uow,
        )
        await message_service.reply(
            first.conversation.id, talent, "Hello, yes I am. What did you have in mind?", None, uow,
        )

    logger.info("Seeded %d actors and conversation %s", len(ACTORS), first.conversation.id)


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
