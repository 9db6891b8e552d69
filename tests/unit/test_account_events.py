from __future__ import annotations

from datetime import datetime, timezone

import pytest

from messaging_service.domain.value_objects.enums import Role, SubscriptionStatus, parse_subscription_status
from messaging_service.workers.account_events_consumer import handle_event
from tests.conftest import FakeUoW


@pytest.mark.asyncio
async def test_registration_creates_actor():
    uow = FakeUoW()

    await handle_event("actor.registered", {"actor_id": "t-9", "role": "talent"}, uow)

    actor = await uow.actors.get_by_id("t-9")
    assert actor.role == Role.TALENT
    assert actor.subscription_status == SubscriptionStatus.NONE
    assert uow._committed is True


@pytest.mark.asyncio
async def test_subscription_update_before_registration():
    uow = FakeUoW()

    await handle_event(
        "subscription.updated",
        {"actor_id": "c-9", "status": "trialing", "current_period_end": "2026-01-31T00:00:00+00:00"},
        uow,
    )
    assert (await uow.actors.get_by_id("c-9")).role is None

    await handle_event("actor.registered", {"actor_id": "c-9", "role": "COMPANY"}, uow)

    actor = await uow.actors.get_by_id("c-9")
    assert actor.role == Role.COMPANY
    assert actor.subscription_status == SubscriptionStatus.TRIAL
    assert actor.subscription_period_end == datetime(2026, 1, 31, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_unknown_event_is_ignored():
    uow = FakeUoW()

    await handle_event("order.created", {"actor_id": "x"}, uow)

    assert uow.actors._store == {}
    assert uow._committed is False


@pytest.mark.asyncio
async def test_bad_role_raises():
    with pytest.raises(ValueError):
        await handle_event("actor.updated", {"actor_id": "x", "role": "wizard"}, FakeUoW())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("ACTIVE", SubscriptionStatus.ACTIVE),
        ("PAST_DUE", SubscriptionStatus.PAST_DUE),
        ("active", SubscriptionStatus.ACTIVE),
        ("trialing", SubscriptionStatus.TRIAL),
        ("past_due", SubscriptionStatus.PAST_DUE),
        ("unpaid", SubscriptionStatus.PAST_DUE),
        ("canceled", SubscriptionStatus.CANCELLED),
        ("paused", SubscriptionStatus.CANCELLED),
        ("incomplete", SubscriptionStatus.NONE),
        ("incomplete_expired", SubscriptionStatus.EXPIRED),
        ("something-new", SubscriptionStatus.NONE),
        (None, SubscriptionStatus.NONE),
        ("", SubscriptionStatus.NONE),
    ],
)
def test_parse_subscription_status(raw, expected):
    assert parse_subscription_status(raw) == expected
