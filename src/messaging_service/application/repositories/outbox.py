from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Protocol


class OutboxEvent(Protocol):
    """Any domain event dataclass carrying a class-level ``event_type``."""

    event_type: ClassVar[str]


class OutboxWriter(Protocol):
    async def add_event(self, event: OutboxEvent) -> None: ...

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]: ...

    async def mark_sent(self, ids: list[int]) -> None: ...

    async def mark_failed(
        self, record_id: int, next_retry_at: datetime, error: str | None = None
    ) -> None: ...

    async def mark_dead(self, record_id: int, error: str | None = None) -> None:
        """Give up on a record; it is never fetched again."""
        ...


@dataclass(frozen=True, slots=True)
class OutboxRecord:
    """Read-model handed to the outbox worker."""

    id: int
    event_type: str
    payload: dict[str, Any]
    attempts: int
