"""Unit tests for the testing fakes and spies."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from mp_outbox.application.events import SubscriptionRegistry
from mp_outbox.kernel.events import DomainEvent
from mp_outbox.testing import (
    FakeClock,
    SequentialUuidGenerator,
    failing_subscriber,
    ids_of,
    spy_on_topic,
    utc,
)

EVENT = DomainEvent(id="e1", topic="ConventionSubmitted", payload={}, occurred_at=utc(2022, 1, 1))


class TestSequentialUuidGenerator:
    def test_counts_up(self) -> None:
        ids = SequentialUuidGenerator()
        assert [ids.new(), ids.new()] == ["event-1", "event-2"]

    def test_queued_ids_come_first(self) -> None:
        ids = SequentialUuidGenerator(prefix="evt")
        ids.set_next("a", "b")
        assert [ids.new(), ids.new(), ids.new()] == ["a", "b", "evt-1"]


class TestFakeClockAndHelpers:
    def test_fake_clock_is_pinned(self) -> None:
        assert FakeClock().now() == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def test_utc(self) -> None:
        assert utc(2022, 1, 2, 3) == datetime(2022, 1, 2, 3, tzinfo=UTC)

    def test_ids_of(self) -> None:
        assert ids_of([EVENT]) == ["e1"]


class TestSpies:
    def test_spy_records_received_events(self) -> None:
        registry = SubscriptionRegistry()
        received = spy_on_topic(registry, "ConventionSubmitted", "spy")

        (subscription,) = registry.subscribers_for("ConventionSubmitted")
        asyncio.run(subscription.invoke(EVENT))

        assert received == [EVENT]

    def test_failing_subscriber_records_then_raises(self) -> None:
        registry = SubscriptionRegistry()
        received = failing_subscriber(registry, "ConventionSubmitted", "broken", "nope")

        (subscription,) = registry.subscribers_for("ConventionSubmitted")
        with pytest.raises(RuntimeError, match="nope"):
            asyncio.run(subscription.invoke(EVENT))

        assert received == [EVENT]
