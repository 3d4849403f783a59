"""In-memory adapter – outbox repository and queries."""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Sequence
from datetime import datetime

from mp_outbox.application.outbox import OutboxQueries, OutboxRepository
from mp_outbox.kernel.errors import DuplicateEventIdError
from mp_outbox.kernel.events import DomainEvent, EventStatus
from mp_outbox.kernel.time import utc_now

_Snapshot = tuple[dict[str, DomainEvent], dict[str, datetime]]


class InMemoryOutboxRepository(OutboxRepository):
    """Dict-backed outbox repository for tests and single-process deployments."""

    def __init__(self) -> None:
        self._events: dict[str, DomainEvent] = {}
        self._claims: dict[str, datetime] = {}

    async def save(self, event: DomainEvent) -> None:
        existing = self._events.get(event.id)
        if existing is not None and not existing.is_same_occurrence(event):
            raise DuplicateEventIdError(event.id)
        self._events[event.id] = event
        self._claims.pop(event.id, None)

    async def mark_events_as_in_process(
        self,
        events: Sequence[DomainEvent],
        claimed_at: datetime | None = None,
    ) -> None:
        claimed_at = claimed_at or utc_now()
        for event in events:
            stored = self._events.get(event.id)
            if stored is not None:
                self._events[event.id] = stored.with_status(EventStatus.IN_PROCESS)
                self._claims[event.id] = claimed_at

    @property
    def events(self) -> list[DomainEvent]:
        return list(self._events.values())

    def get(self, event_id: str) -> DomainEvent | None:
        return self._events.get(event_id)

    def claimed_at(self, event_id: str) -> datetime | None:
        return self._claims.get(event_id)

    def snapshot(self) -> _Snapshot:
        return dict(self._events), dict(self._claims)

    def restore(self, snapshot: _Snapshot) -> None:
        events, claims = snapshot
        self._events = dict(events)
        self._claims = dict(claims)


class InMemoryOutboxQueries(OutboxQueries):
    """Crawler queries evaluated over an :class:`InMemoryOutboxRepository`."""

    def __init__(self, repository: InMemoryOutboxRepository) -> None:
        self._repository = repository

    async def find_by_status(
        self,
        statuses: Iterable[EventStatus],
        limit: int | None = None,
    ) -> list[DomainEvent]:
        wanted = frozenset(statuses)
        events = sorted(
            (e for e in self._repository.events if e.status in wanted),
            key=lambda e: e.occurred_at,
        )
        return events if limit is None else events[:limit]

    async def get_events_to_publish(self, limit: int) -> list[DomainEvent]:
        events = [
            e
            for e in self._repository.events
            if e.status is EventStatus.TO_REPUBLISH
            or (e.status is EventStatus.NEVER_PUBLISHED and not e.was_quarantined)
        ]
        events.sort(key=lambda e: (e.priority is None, e.priority or 0, e.occurred_at))
        return events[:limit]

    async def get_failed_events(self, limit: int) -> list[DomainEvent]:
        events = sorted(
            (
                e
                for e in self._repository.events
                if e.status is EventStatus.FAILED_BUT_WILL_RETRY and not e.was_quarantined
            ),
            key=lambda e: e.occurred_at,
        )
        return [
            dataclasses.replace(
                e, publications=tuple(sorted(e.publications, key=lambda p: p.published_at))
            )
            for e in events[:limit]
        ]

    async def get_stale_in_process_events(
        self, claimed_before: datetime, limit: int
    ) -> list[DomainEvent]:
        stale = []
        for event in self._repository.events:
            if event.status is not EventStatus.IN_PROCESS:
                continue
            claimed_at = self._repository.claimed_at(event.id)
            if claimed_at is None or claimed_at < claimed_before:
                stale.append(event)
        stale.sort(key=lambda e: e.occurred_at)
        return stale[:limit]


__all__ = ["InMemoryOutboxQueries", "InMemoryOutboxRepository"]
