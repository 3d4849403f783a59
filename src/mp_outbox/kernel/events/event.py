"""Domain events, their publications and delivery failures."""

from __future__ import annotations

import dataclasses
from datetime import datetime
from enum import Enum
from typing import Any, TypeAlias

Topic: TypeAlias = str
SubscriptionId: TypeAlias = str


class EventStatus(str, Enum):
    NEVER_PUBLISHED = "never-published"
    IN_PROCESS = "in-process"
    PUBLISHED = "published"
    FAILED_BUT_WILL_RETRY = "failed-but-will-retry"
    FAILED_TOO_MANY_TIMES = "failed-too-many-times"
    TO_REPUBLISH = "to-republish"


@dataclasses.dataclass(frozen=True)
class EventFailure:
    """One subscriber that raised during a delivery attempt."""

    subscription_id: SubscriptionId
    error_message: str


@dataclasses.dataclass(frozen=True)
class EventPublication:
    """One delivery attempt; ``failures`` is empty when every subscriber succeeded."""

    published_at: datetime
    failures: tuple[EventFailure, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.failures, tuple):
            object.__setattr__(self, "failures", tuple(self.failures))

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclasses.dataclass(frozen=True)
class DomainEvent:
    """Immutable record of a business occurrence stored in the outbox.

    Only ``publications``, ``status`` and ``was_quarantined`` ever change, and
    they change by building a new value (see :meth:`with_publication`).  A
    retry reuses the same ``id``; an event is never re-created for the same
    occurrence.
    """

    id: str
    topic: Topic
    payload: Any
    occurred_at: datetime
    publications: tuple[EventPublication, ...] = ()
    status: EventStatus = EventStatus.NEVER_PUBLISHED
    was_quarantined: bool = False
    priority: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.publications, tuple):
            object.__setattr__(self, "publications", tuple(self.publications))
        if not isinstance(self.status, EventStatus):
            object.__setattr__(self, "status", EventStatus(self.status))

    @property
    def last_publication(self) -> EventPublication | None:
        return get_last_publication(self)

    @property
    def last_failed_subscription_ids(self) -> frozenset[SubscriptionId]:
        last = self.last_publication
        if last is None:
            return frozenset()
        return frozenset(failure.subscription_id for failure in last.failures)

    def with_publication(
        self,
        publication: EventPublication,
        *,
        status: EventStatus,
        was_quarantined: bool,
    ) -> DomainEvent:
        return dataclasses.replace(
            self,
            publications=(*self.publications, publication),
            status=status,
            was_quarantined=was_quarantined,
        )

    def with_status(self, status: EventStatus) -> DomainEvent:
        return dataclasses.replace(self, status=status)

    def is_same_occurrence(self, other: DomainEvent) -> bool:
        """True when *other* describes the same business occurrence (same id, topic, payload, time)."""
        return (
            self.id == other.id
            and self.topic == other.topic
            and self.occurred_at == other.occurred_at
            and self.payload == other.payload
        )


def get_last_publication(event: DomainEvent) -> EventPublication | None:
    """Return the most recent publication by ``published_at``.

    Publications are not guaranteed to be stored in chronological order, so
    the list position is never used.
    """
    if not event.publications:
        return None
    return max(event.publications, key=lambda publication: publication.published_at)


__all__ = [
    "DomainEvent",
    "EventFailure",
    "EventPublication",
    "EventStatus",
    "SubscriptionId",
    "Topic",
    "get_last_publication",
]
