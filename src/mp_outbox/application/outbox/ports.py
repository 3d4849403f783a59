"""Outbox store ports – durable event persistence and crawler queries."""
from __future__ import annotations

import abc
from collections.abc import Iterable, Sequence
from datetime import datetime

from mp_outbox.kernel.events import DomainEvent, EventStatus

#: Statuses the crawler (re)delivers.
STATUSES_TO_PUBLISH: frozenset[EventStatus] = frozenset(
    {
        EventStatus.NEVER_PUBLISHED,
        EventStatus.FAILED_BUT_WILL_RETRY,
        EventStatus.TO_REPUBLISH,
    }
)


class OutboxRepository(abc.ABC):
    """Port: write side of the outbox.

    ``save`` is an upsert keyed on the event id: a new id is inserted, a known
    id has its ``publications``, ``status`` and ``was_quarantined`` replaced
    by the given value (last write wins).  Reusing an id for a different
    occurrence raises :class:`~mp_outbox.kernel.errors.DuplicateEventIdError`.
    """

    @abc.abstractmethod
    async def save(self, event: DomainEvent) -> None: ...

    @abc.abstractmethod
    async def mark_events_as_in_process(
        self,
        events: Sequence[DomainEvent],
        claimed_at: datetime | None = None,
    ) -> None:
        """Claim *events* for one crawler; ``claimed_at`` starts the claim lease.

        Saving an event ends its claim.
        """
        ...


class OutboxQueries(abc.ABC):
    """Port: read side of the outbox used by the crawler."""

    @abc.abstractmethod
    async def find_by_status(
        self,
        statuses: Iterable[EventStatus],
        limit: int | None = None,
    ) -> list[DomainEvent]: ...

    @abc.abstractmethod
    async def get_events_to_publish(self, limit: int) -> list[DomainEvent]:
        """``never-published`` and ``to-republish`` events, priority first."""
        ...

    @abc.abstractmethod
    async def get_failed_events(self, limit: int) -> list[DomainEvent]:
        """``failed-but-will-retry`` events that are not quarantined."""
        ...

    @abc.abstractmethod
    async def get_stale_in_process_events(
        self, claimed_before: datetime, limit: int
    ) -> list[DomainEvent]:
        """``in-process`` events whose claim started before *claimed_before*."""
        ...


__all__ = ["STATUSES_TO_PUBLISH", "OutboxQueries", "OutboxRepository"]
