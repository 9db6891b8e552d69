from __future__ import annotations

from datetime import datetime
from typing import Protocol

from messaging_service.domain.entities.actor import Actor
from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus


class ActorReader(Protocol):
    async def get_by_id(self, actor_id: str) -> Actor | None: ...


class ActorWriter(Protocol):
    async def upsert_role(self, actor_id: str, role: Role) -> None: ...

    async def upsert_subscription(
        self,
        actor_id: str,
        status: SubscriptionStatus,
        period_end: datetime | None,
    ) -> None:
        """Record the latest subscription state. Creates the actor row if missing."""
        ...
