"""Kernel events – outbox event model, topic catalogue and factory."""
from mp_outbox.kernel.events.event import (
    DomainEvent,
    EventFailure,
    EventPublication,
    EventStatus,
    SubscriptionId,
    Topic,
    get_last_publication,
)
from mp_outbox.kernel.events.factory import EventFactory
from mp_outbox.kernel.events.topics import TopicCatalogue, encode_payload

__all__ = [
    "DomainEvent",
    "EventFactory",
    "EventFailure",
    "EventPublication",
    "EventStatus",
    "SubscriptionId",
    "Topic",
    "TopicCatalogue",
    "encode_payload",
    "get_last_publication",
]
