"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import dataclasses
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import pytest

from messaging_service.application.dto.conversation import ConversationFilterDTO
from messaging_service.application.dto.principal import Principal
from messaging_service.application.repositories.outbox import OutboxEvent, OutboxRecord
from messaging_service.domain.entities.actor import Actor
from messaging_service.domain.entities.conversation import Conversation, ordered_pair
from messaging_service.domain.entities.message import Message
from messaging_service.domain.value_objects.enums import (
    ConversationStage,
    Role,
    SubscriptionStatus,
)

TALENT_ID = "talent-1"
PRO_ID = "pro-1"
COMPANY_ID = "company-1"
ADMIN_ID = "admin-1"


@pytest.fixture
def talent_principal() -> Principal:
    return Principal(actor_id=TALENT_ID, role=Role.TALENT)


@pytest.fixture
def pro_principal() -> Principal:
    return Principal(actor_id=PRO_ID, role=Role.PROFESSIONAL)


@pytest.fixture
def company_principal() -> Principal:
    return Principal(actor_id=COMPANY_ID, role=Role.COMPANY)


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(actor_id=ADMIN_ID, role=Role.ADMIN)


def make_actor(
    actor_id: str,
    role: Role,
    status: SubscriptionStatus = SubscriptionStatus.NONE,
) -> Actor:
    return Actor(id=actor_id, role=role, subscription_status=status)


def make_conversation(
    *,
    initiated_by: str = PRO_ID,
    other: str = TALENT_ID,
    conversation_id: UUID | None = None,
    stage: str = ConversationStage.CONTACT_INITIATED,
    updated_at: datetime | None = None,
) -> Conversation:
    now = datetime.now(timezone.utc)
    low, high = ordered_pair(initiated_by, other)
    return Conversation(
        id=conversation_id or uuid.uuid4(),
        participant_low=low,
        participant_high=high,
        initiated_by=initiated_by,
        stage=stage,
        created_at=now,
        updated_at=updated_at or now,
    )


def make_message(
    *,
    conversation_id: UUID | None = None,
    sender_id: str = PRO_ID,
    content: str = "hello",
    read_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id or uuid.uuid4(),
        sender_id=sender_id,
        content=content,
        client_msg_id=uuid.uuid4(),
        created_at=datetime.now(timezone.utc),
        read_at=read_at,
    )


@dataclass
class FakeActorReader:
    _store: dict[str, Actor] = field(default_factory=dict)

    async def get_by_id(self, actor_id: str) -> Actor | None:
        return self._store.get(actor_id)

    def add(self, actor: Actor) -> None:
        self._store[actor.id] = actor


@dataclass
class FakeActorWriter:
    _reader: FakeActorReader

    async def upsert_role(self, actor_id: str, role: Role) -> None:
        existing = self._reader._store.get(actor_id)
        if existing is None:
            self._reader._store[actor_id] = Actor(id=actor_id, role=role)
        else:
            self._reader._store[actor_id] = dataclasses.replace(existing, role=role)

    async def upsert_subscription(
        self,
        actor_id: str,
        status: SubscriptionStatus,
        period_end: datetime | None,
    ) -> None:
        existing = self._reader._store.get(actor_id) or Actor(id=actor_id, role=None)
        self._reader._store[actor_id] = dataclasses.replace(
            existing, subscription_status=status, subscription_period_end=period_end,
        )


@dataclass
class FakeConversationReader:
    _store: dict[UUID, Conversation] = field(default_factory=dict)

    def add(self, conversation: Conversation) -> None:
        self._store[conversation.id] = conversation

    async def get_by_id(self, conversation_id: UUID) -> Conversation | None:
        return self._store.get(conversation_id)

    async def get_between(self, actor_a: str, actor_b: str) -> Conversation | None:
        pair = frozenset((actor_a, actor_b))
        found = next((c for c in self._store.values() if c.participant_ids == pair), None)
        # Yield after reading so concurrent callers can all miss the row.
        await asyncio.sleep(0)
        return found

    async def is_participant(self, conversation_id: UUID, actor_id: str) -> bool:
        conv = self._store.get(conversation_id)
        return conv is not None and conv.has_participant(actor_id)

    async def participant_ids(self, conversation_id: UUID) -> frozenset[str] | None:
        conv = self._store.get(conversation_id)
        return conv.participant_ids if conv else None

    async def list_for_actor(
        self, actor_id: str, *, cursor: str | None = None, limit: int = 20
    ) -> list[Conversation]:
        mine = [c for c in self._store.values() if c.has_participant(actor_id)]
        mine.sort(key=lambda c: (c.updated_at, c.id), reverse=True)
        return mine[:limit]

    async def list_for_admin(self, filters: ConversationFilterDTO) -> list[Conversation]:
        convs = list(self._store.values())
        if filters.participant_id:
            convs = [c for c in convs if c.has_participant(filters.participant_id)]
        convs.sort(key=lambda c: (c.updated_at, c.id), reverse=True)
        return convs[: filters.limit]


@dataclass
class FakeConversationWriter:
    _reader: FakeConversationReader

    async def create_or_get(self, conversation: Conversation) -> tuple[Conversation, bool]:
        # No await between check and insert: behaves like the unique pair constraint.
        for existing in self._reader._store.values():
            if existing.participant_ids == conversation.participant_ids:
                return existing, False
        self._reader._store[conversation.id] = conversation
        return conversation, True

    async def touch_updated_at(self, conversation_id: UUID, ts: datetime) -> None:
        conv = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = dataclasses.replace(conv, updated_at=ts)

    async def set_stage(self, conversation_id: UUID, stage: ConversationStage) -> None:
        conv = self._reader._store[conversation_id]
        self._reader._store[conversation_id] = dataclasses.replace(conv, stage=stage)


@dataclass
class FakeMessageReader:
    _messages: list[Message] = field(default_factory=list)
    _conversations: FakeConversationReader | None = None

    def _in(self, conversation_id: UUID) -> list[Message]:
        return [m for m in self._messages if m.conversation_id == conversation_id]

    async def list_messages(
        self, conversation_id: UUID, *, cursor: str | None = None, limit: int = 50
    ) -> list[Message]:
        return self._in(conversation_id)[:limit]

    async def last_messages(self, conversation_ids: Sequence[UUID]) -> dict[UUID, Message]:
        last: dict[UUID, Message] = {}
        for m in self._messages:
            if m.conversation_id in conversation_ids:
                last[m.conversation_id] = m
        return last

    async def unread_counts(
        self, conversation_ids: Sequence[UUID], reader_id: str
    ) -> dict[UUID, int]:
        counts: dict[UUID, int] = {}
        for m in self._messages:
            if m.conversation_id in conversation_ids and m.sender_id != reader_id and m.read_at is None:
                counts[m.conversation_id] = counts.get(m.conversation_id, 0) + 1
        return counts

    async def count_unread_total(self, reader_id: str) -> int:
        assert self._conversations is not None
        mine = {c.id for c in self._conversations._store.values() if c.has_participant(reader_id)}
        return sum(
            1 for m in self._messages
            if m.conversation_id in mine and m.sender_id != reader_id and m.read_at is None
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        existing = await self.get_by_client_msg_id(
            message.conversation_id, message.sender_id, message.client_msg_id,
        )
        if existing is not None:
            return existing, False
        self._reader._messages.append(message)
        return message, True

    async def get_by_client_msg_id(
        self, conversation_id: UUID, sender_id: str, client_msg_id: UUID
    ) -> Message | None:
        for m in self._reader._messages:
            if (
                m.conversation_id == conversation_id
                and m.sender_id == sender_id
                and m.client_msg_id == client_msg_id
            ):
                return m
        return None

    async def mark_read(self, conversation_id: UUID, reader_id: str, ts: datetime) -> int:
        marked = 0
        for i, m in enumerate(self._reader._messages):
            if m.conversation_id == conversation_id and m.sender_id != reader_id and m.read_at is None:
                self._reader._messages[i] = dataclasses.replace(m, read_at=ts)
                marked += 1
        return marked


@dataclass
class FakeOutboxWriter:
    _records: list[dict[str, Any]] = field(default_factory=list)
    _pending: list[OutboxRecord] = field(default_factory=list)
    _sent: list[int] = field(default_factory=list)
    _failed: list[tuple[int, datetime, str | None]] = field(default_factory=list)
    _dead: list[int] = field(default_factory=list)

    async def add_event(self, event: OutboxEvent) -> None:
        self._records.append(
            {"event_type": event.event_type, "payload": dataclasses.asdict(event)}  # type: ignore[call-overload]
        )

    async def fetch_pending(self, batch_size: int) -> list[OutboxRecord]:
        batch, self._pending = self._pending[:batch_size], self._pending[batch_size:]
        return batch

    async def mark_sent(self, ids: list[int]) -> None:
        self._sent.extend(ids)

    async def mark_failed(
        self, record_id: int, next_retry_at: datetime, error: str | None = None
    ) -> None:
        self._failed.append((record_id, next_retry_at, error))

    async def mark_dead(self, record_id: int, error: str | None = None) -> None:
        self._dead.append(record_id)


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    actors: FakeActorReader = field(default_factory=FakeActorReader)
    actors_w: FakeActorWriter | None = None
    conversations: FakeConversationReader = field(default_factory=FakeConversationReader)
    conversations_w: FakeConversationWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    outbox: FakeOutboxWriter = field(default_factory=FakeOutboxWriter)
    _committed: bool = False
    _commits: int = 0

    def __post_init__(self) -> None:
        if self.actors_w is None:
            self.actors_w = FakeActorWriter(self.actors)
        if self.conversations_w is None:
            self.conversations_w = FakeConversationWriter(self.conversations)
        if self.messages._conversations is None:
            self.messages._conversations = self.conversations
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    async def commit(self) -> None:
        self._committed = True
        self._commits += 1

    async def rollback(self) -> None:
        pass


def seeded_uow() -> FakeUoW:
    """Two talents, an ACTIVE professional, an EXPIRED company and an admin."""
    uow = FakeUoW()
    uow.actors.add(make_actor(TALENT_ID, Role.TALENT))
    uow.actors.add(make_actor("talent-2", Role.TALENT))
    uow.actors.add(make_actor(PRO_ID, Role.PROFESSIONAL, SubscriptionStatus.ACTIVE))
    uow.actors.add(make_actor(COMPANY_ID, Role.COMPANY, SubscriptionStatus.EXPIRED))
    uow.actors.add(make_actor(ADMIN_ID, Role.ADMIN))
    return uow


@pytest.fixture
def uow() -> FakeUoW:
    return seeded_uow()
