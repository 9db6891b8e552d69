from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from messaging_service.application.dto.conversation import ConversationFilterDTO
from messaging_service.domain.entities.conversation import Conversation, ordered_pair
from messaging_service.domain.value_objects.enums import ConversationStage
from messaging_service.infrastructure.db.mappers import conversation as mapper
from messaging_service.infrastructure.db.models.conversation import ConversationModel
from messaging_service.infrastructure.db.repositories._cursor import decode_cursor


def _involves(actor_id: str):
    return or_(
        ConversationModel.participant_low == actor_id,
        ConversationModel.participant_high == actor_id,
    )


def _newest_first(stmt, cursor: str | None, limit: int):
    stmt = stmt.order_by(
        ConversationModel.updated_at.desc(), ConversationModel.id
    ).limit(limit)
    if cursor:
        ts, cid = decode_cursor(cursor)
        stmt = stmt.where(
            (ConversationModel.updated_at < ts)
            | (
                (ConversationModel.updated_at == ts)
                & (ConversationModel.id > cid)
            )
        )
    return stmt


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        result = await self._session.get(
            ConversationModel, conversation_id, populate_existing=True,
        )
        return mapper.model_to_entity(result) if result else None

    async def get_between(self, actor_a: str, actor_b: str) -> Conversation | None:
        low, high = ordered_pair(actor_a, actor_b)
        stmt = select(ConversationModel).where(
            ConversationModel.participant_low == low,
            ConversationModel.participant_high == high,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def is_participant(self, conversation_id: UUID, actor_id: str) -> bool:
        stmt = (
            select(ConversationModel.id)
            .where(ConversationModel.id == conversation_id, _involves(actor_id))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def participant_ids(self, conversation_id: UUID) -> frozenset[str] | None:
        stmt = select(
            ConversationModel.participant_low, ConversationModel.participant_high
        ).where(ConversationModel.id == conversation_id)
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        return frozenset(row) if row else None

    async def list_for_actor(
        self,
        actor_id: str,
        *,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Conversation]:
        stmt = _newest_first(
            select(ConversationModel).where(_involves(actor_id)), cursor, limit
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_admin(
        self,
        filters: ConversationFilterDTO,
    ) -> list[Conversation]:
        stmt = select(ConversationModel)
        if filters.participant_id:
            stmt = stmt.where(_involves(filters.participant_id))
        stmt = _newest_first(stmt, filters.cursor, filters.limit)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_or_get(self, conversation: Conversation) -> tuple[Conversation, bool]:
        """Insert the conversation, converging with concurrent first contacts.

        A concurrent insert for the same pair blocks on the unique index until
        the other transaction finishes; if it committed, DO NOTHING fires and
        the committed row is read back.
        """
        stmt = (
            pg_insert(ConversationModel)
            .values(**mapper.entity_to_values(conversation))
            .on_conflict_do_nothing(constraint="uq_conversation_pair")
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        existing = await self._session.execute(
            select(ConversationModel).where(
                ConversationModel.participant_low == conversation.participant_low,
                ConversationModel.participant_high == conversation.participant_high,
            )
        )
        return mapper.model_to_entity(existing.scalar_one()), False

    async def touch_updated_at(
        self,
        conversation_id: UUID,
        ts: datetime,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(updated_at=ts)
        )
        await self._session.execute(stmt)

    async def set_stage(
        self,
        conversation_id: UUID,
        stage: ConversationStage,
    ) -> None:
        stmt = (
            update(ConversationModel)
            .where(ConversationModel.id == conversation_id)
            .values(stage=stage.value)
        )
        await self._session.execute(stmt)
