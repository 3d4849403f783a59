"""Subscription registry – topic → named subscriber callbacks."""
from __future__ import annotations

import dataclasses
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from mp_outbox.kernel.events import DomainEvent, SubscriptionId, Topic, TopicCatalogue
from mp_outbox.resilience.timeouts import TimeoutPolicy

#: A subscriber; sync or async, its return value is ignored.
Callback = Callable[[DomainEvent], Awaitable[Any] | Any]

#: Startup wiring entry owned by a business module.
SubscriptionSpec = tuple[Topic, SubscriptionId, Callback]


@dataclasses.dataclass(frozen=True)
class Subscription:
    """A callback registered under a stable id for one topic."""

    topic: Topic
    subscription_id: SubscriptionId
    callback: Callback

    async def invoke(self, event: DomainEvent) -> None:
        result = self.callback(event)
        if inspect.isawaitable(result):
            await result


class SubscriptionRegistry:
    """Process-local registry built once at startup and passed to the bus.

    Exactly one callback exists per ``(topic, subscription_id)``;
    subscribing the same pair again replaces the previous callback.  The
    stable id is what lets a retry target only the subscribers that failed.
    """

    def __init__(
        self,
        *,
        default_timeout: float | None = None,
        catalogue: TopicCatalogue | None = None,
    ) -> None:
        self._default_timeout = default_timeout
        self._catalogue = catalogue
        self._subscriptions: dict[Topic, dict[SubscriptionId, Subscription]] = {}

    @classmethod
    def from_subscriptions(
        cls,
        subscriptions: Iterable[SubscriptionSpec],
        *,
        default_timeout: float | None = None,
        catalogue: TopicCatalogue | None = None,
    ) -> SubscriptionRegistry:
        registry = cls(default_timeout=default_timeout, catalogue=catalogue)
        for topic, subscription_id, callback in subscriptions:
            registry.subscribe(topic, subscription_id, callback)
        return registry

    def subscribe(
        self,
        topic: Topic,
        subscription_id: SubscriptionId,
        callback: Callback,
        *,
        timeout: float | None = None,
    ) -> Subscription:
        """Register *callback*; a timeout (explicit or default) counts as a failure."""
        if self._catalogue is not None:
            self._catalogue.payload_type(topic)
        timeout = timeout if timeout is not None else self._default_timeout
        if timeout:
            callback = TimeoutPolicy(timeout).wrap(callback)
        subscription = Subscription(topic, subscription_id, callback)
        self._subscriptions.setdefault(topic, {})[subscription_id] = subscription
        return subscription

    def subscribers_for(self, topic: Topic) -> list[Subscription]:
        return list(self._subscriptions.get(topic, {}).values())

    @property
    def topics(self) -> frozenset[Topic]:
        return frozenset(topic for topic, subs in self._subscriptions.items() if subs)

    def __len__(self) -> int:
        return sum(len(subs) for subs in self._subscriptions.values())


__all__ = ["Callback", "Subscription", "SubscriptionRegistry", "SubscriptionSpec"]
