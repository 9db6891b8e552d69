from __future__ import annotations

import dataclasses
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.application.repositories.outbox import OutboxEvent, OutboxRecord
from messaging_service.infrastructure.db.models.outbox import OutboxMessageModel, OutboxStatus


class OutboxWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_event(self, event: OutboxEvent) -> None:
        model = OutboxMessageModel(
            event_type=event.event_type,
            payload=dataclasses.asdict(event),  # type: ignore[call-overload]
        )
        self._session.add(model)
        await self._session.flush()

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        stmt = (
            select(OutboxMessageModel)
            .where(
                OutboxMessageModel.status.in_([OutboxStatus.PENDING, OutboxStatus.FAILED]),
                (
                    OutboxMessageModel.next_retry_at.is_(None)
                    | (OutboxMessageModel.next_retry_at <= func.now())
                ),
            )
            .order_by(OutboxMessageModel.created_at.asc())
            .limit(batch_size)
            .with_for_update(skip_locked=True)
        )
        result = await self._session.execute(stmt)
        rows = result.scalars().all()

        if rows:
            await self._session.execute(
                update(OutboxMessageModel)
                .where(OutboxMessageModel.id.in_([r.id for r in rows]))
                .values(status=OutboxStatus.PROCESSING)
            )
            await self._session.flush()

        return [
            OutboxRecord(
                id=r.id,
                event_type=r.event_type,
                payload=r.payload,
                attempts=r.attempts,
            )
            for r in rows
        ]

    async def mark_sent(self, ids: list[int]) -> None:
        if not ids:
            return
        stmt = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.id.in_(ids))
            .values(status=OutboxStatus.SENT, published_at=func.now())
        )
        await self._session.execute(stmt)

    async def mark_failed(
        self,
        record_id: int,
        next_retry_at: datetime,
        error: str | None = None,
    ) -> None:
        stmt = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.id == record_id)
            .values(
                status=OutboxStatus.FAILED,
                attempts=OutboxMessageModel.attempts + 1,
                next_retry_at=next_retry_at,
                last_error=error,
            )
        )
        await self._session.execute(stmt)

    async def mark_dead(self, record_id: int, error: str | None = None) -> None:
        stmt = (
            update(OutboxMessageModel)
            .where(OutboxMessageModel.id == record_id)
            .values(status=OutboxStatus.DEAD, last_error=error)
        )
        await self._session.execute(stmt)
