"""Unit tests for the subscription registry."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from mp_outbox.application.events import Subscription, SubscriptionRegistry
from mp_outbox.kernel.errors import InfrastructureTimeoutError, UnknownTopicError
from mp_outbox.kernel.events import DomainEvent, TopicCatalogue
from mp_outbox.testing import utc

EVENT = DomainEvent(id="e1", topic="ConventionSubmitted", payload={}, occurred_at=utc(2022, 1, 1))


async def _noop(event: DomainEvent) -> None:
    return None


@dataclass
class ConventionPayload:
    id: str


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestSubscribe:
    def test_subscribers_are_grouped_by_topic(self) -> None:
        registry = SubscriptionRegistry()
        registry.subscribe("ConventionSubmitted", "notifyAgency", _noop)
        registry.subscribe("ConventionSubmitted", "notifyBeneficiary", _noop)
        registry.subscribe("AgencyUpdated", "refreshCache", _noop)

        ids = [s.subscription_id for s in registry.subscribers_for("ConventionSubmitted")]

        assert ids == ["notifyAgency", "notifyBeneficiary"]
        assert registry.topics == frozenset({"ConventionSubmitted", "AgencyUpdated"})
        assert len(registry) == 3

    def test_unknown_topic_has_no_subscribers(self) -> None:
        assert SubscriptionRegistry().subscribers_for("Nothing") == []

    def test_same_pair_replaces_the_previous_callback(self) -> None:
        registry = SubscriptionRegistry()
        registry.subscribe("ConventionSubmitted", "notifyAgency", _noop)

        async def _other(event: DomainEvent) -> None:
            return None

        registry.subscribe("ConventionSubmitted", "notifyAgency", _other)

        (subscription,) = registry.subscribers_for("ConventionSubmitted")
        assert subscription.callback is _other
        assert len(registry) == 1

    def test_from_subscriptions(self) -> None:
        registry = SubscriptionRegistry.from_subscriptions(
            [
                ("ConventionSubmitted", "notifyAgency", _noop),
                ("AgencyUpdated", "refreshCache", _noop),
            ]
        )
        assert len(registry) == 2

    def test_catalogue_rejects_unknown_topics(self) -> None:
        registry = SubscriptionRegistry(catalogue=TopicCatalogue({"ConventionSubmitted": ConventionPayload}))

        with pytest.raises(UnknownTopicError):
            registry.subscribe("Typo", "notifyAgency", _noop)


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


class TestSubscriptionInvoke:
    def test_awaits_async_callbacks(self) -> None:
        received: list[DomainEvent] = []

        async def _record(event: DomainEvent) -> None:
            received.append(event)

        asyncio.run(Subscription("ConventionSubmitted", "s1", _record).invoke(EVENT))

        assert received == [EVENT]

    def test_calls_sync_callbacks(self) -> None:
        received: list[DomainEvent] = []

        asyncio.run(Subscription("ConventionSubmitted", "s1", received.append).invoke(EVENT))

        assert received == [EVENT]

    def test_default_timeout_applies_to_every_subscriber(self) -> None:
        registry = SubscriptionRegistry(default_timeout=0.01)

        async def _hang(event: DomainEvent) -> None:
            await asyncio.sleep(5)

        subscription = registry.subscribe("ConventionSubmitted", "slow", _hang)

        with pytest.raises(InfrastructureTimeoutError):
            asyncio.run(subscription.invoke(EVENT))

    def test_explicit_timeout_overrides_the_default(self) -> None:
        registry = SubscriptionRegistry(default_timeout=0.01)

        async def _short(event: DomainEvent) -> str:
            await asyncio.sleep(0.05)
            return "done"

        subscription = registry.subscribe("ConventionSubmitted", "patient", _short, timeout=1.0)

        asyncio.run(subscription.invoke(EVENT))
