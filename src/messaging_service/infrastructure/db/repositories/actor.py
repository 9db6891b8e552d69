from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.domain.entities.actor import Actor
from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus
from messaging_service.infrastructure.db.mappers import actor as mapper
from messaging_service.infrastructure.db.models.actor import ActorModel


class ActorReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, actor_id: str) -> Actor | None:
        result = await self._session.get(ActorModel, actor_id)
        return mapper.model_to_entity(result) if result else None


class ActorWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert_role(self, actor_id: str, role: Role) -> None:
        stmt = (
            pg_insert(ActorModel)
            .values(id=actor_id, role=role.value)
            .on_conflict_do_update(
                index_elements=[ActorModel.id],
                set_={"role": role.value, "updated_at": func.now()},
            )
        )
        await self._session.execute(stmt)

    async def upsert_subscription(
        self,
        actor_id: str,
        status: SubscriptionStatus,
        period_end: datetime | None,
    ) -> None:
        # Billing events can arrive before the registration event; the row then
        # has no role until actor.registered sets one.
        stmt = (
            pg_insert(ActorModel)
            .values(
                id=actor_id,
                subscription_status=status.value,
                subscription_period_end=period_end,
            )
            .on_conflict_do_update(
                index_elements=[ActorModel.id],
                set_={
                    "subscription_status": status.value,
                    "subscription_period_end": period_end,
                    "updated_at": func.now(),
                },
            )
        )
        await self._session.execute(stmt)
