"""Application events – subscriptions, delivery bus and crawler."""
from mp_outbox.application.events.bus import MAX_PUBLICATION_ATTEMPTS, EventBus, OutboxEventBus
from mp_outbox.application.events.crawler import EventCrawler, status_before_claim
from mp_outbox.application.events.subscriptions import (
    Callback,
    Subscription,
    SubscriptionRegistry,
    SubscriptionSpec,
)

__all__ = [
    "MAX_PUBLICATION_ATTEMPTS",
    "Callback",
    "EventBus",
    "EventCrawler",
    "OutboxEventBus",
    "Subscription",
    "SubscriptionRegistry",
    "SubscriptionSpec",
    "status_before_claim",
]
