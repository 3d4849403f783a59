"""SQLAlchemy adapter – outbox repository and crawler queries.

An event is stored as one ``outbox`` row, one ``outbox_publications`` row per
delivery attempt and one ``outbox_failures`` row per failed subscriber.
Publications are rewritten as a whole on every save (last write wins).
"""
from __future__ import annotations

import contextlib
import json
from collections.abc import Iterable, Iterator, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, and_, delete, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mp_outbox.adapters.sqlalchemy.tables import (
    outbox_failures_table as failures_t,
    outbox_publications_table as publications_t,
    outbox_table as outbox_t,
)
from mp_outbox.application.outbox import OutboxQueries, OutboxRepository
from mp_outbox.kernel.errors import DuplicateEventIdError, OutboxStoreError
from mp_outbox.kernel.events import (
    DomainEvent,
    EventFailure,
    EventPublication,
    EventStatus,
    TopicCatalogue,
    encode_payload,
)
from mp_outbox.kernel.time import utc_now


@contextlib.contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise driver errors as :class:`OutboxStoreError`."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise OutboxStoreError(f"Outbox {operation} failed: {exc}", cause=exc) from exc


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class _PayloadCodec:
    def __init__(self, catalogue: TopicCatalogue | None) -> None:
        self._catalogue = catalogue

    def encode(self, topic: str, payload: Any) -> Any:
        data = (
            self._catalogue.encode_payload(topic, payload)
            if self._catalogue is not None
            else encode_payload(payload)
        )
        return json.loads(json.dumps(data, default=str))

    def decode(self, topic: str, data: Any) -> Any:
        if self._catalogue is None:
            return data
        return self._catalogue.decode_payload(topic, data)


class SqlAlchemyOutboxRepository(OutboxRepository):
    """Outbox writes bound to the session of the current unit of work."""

    def __init__(self, session: AsyncSession, catalogue: TopicCatalogue | None = None) -> None:
        self._session = session
        self._codec = _PayloadCodec(catalogue)

    async def save(self, event: DomainEvent) -> None:
        payload = self._codec.encode(event.topic, event.payload)
        with translate_errors("save"):
            existing = (
                await self._session.execute(
                    select(outbox_t.c.topic, outbox_t.c.payload, outbox_t.c.occurred_at).where(
                        outbox_t.c.id == event.id
                    )
                )
            ).first()

            if existing is None:
                await self._session.execute(
                    insert(outbox_t).values(
                        id=event.id,
                        topic=event.topic,
                        payload=payload,
                        occurred_at=_as_utc(event.occurred_at),
                        status=event.status.value,
                        was_quarantined=event.was_quarantined,
                        priority=event.priority,
                    )
                )
            else:
                if (
                    existing.topic != event.topic
                    or existing.payload != payload
                    or _as_utc(existing.occurred_at) != _as_utc(event.occurred_at)
                ):
                    raise DuplicateEventIdError(event.id)
                await self._session.execute(
                    update(outbox_t)
                    .where(outbox_t.c.id == event.id)
                    .values(
                        status=event.status.value,
                        was_quarantined=event.was_quarantined,
                        claimed_at=None,
                    )
                )
                await self._delete_publications(event.id)

            await self._insert_publications(event.id, event.publications)

    async def mark_events_as_in_process(
        self,
        events: Sequence[DomainEvent],
        claimed_at: datetime | None = None,
    ) -> None:
        if not events:
            return
        with translate_errors("mark_events_as_in_process"):
            await self._session.execute(
                update(outbox_t)
                .where(outbox_t.c.id.in_([event.id for event in events]))
                .values(
                    status=EventStatus.IN_PROCESS.value,
                    claimed_at=_as_utc(claimed_at or utc_now()),
                )
            )

    async def _delete_publications(self, event_id: str) -> None:
        publication_ids = select(publications_t.c.id).where(publications_t.c.event_id == event_id)
        await self._session.execute(
            delete(failures_t).where(failures_t.c.publication_id.in_(publication_ids))
        )
        await self._session.execute(
            delete(publications_t).where(publications_t.c.event_id == event_id)
        )

    async def _insert_publications(
        self, event_id: str, publications: Iterable[EventPublication]
    ) -> None:
        for publication in publications:
            result = await self._session.execute(
                insert(publications_t).values(
                    event_id=event_id, published_at=_as_utc(publication.published_at)
                )
            )
            publication_id = result.inserted_primary_key[0]
            if publication.failures:
                await self._session.execute(
                    insert(failures_t),
                    [
                        {
                            "publication_id": publication_id,
                            "subscription_id": failure.subscription_id,
                            "error_message": failure.error_message,
                        }
                        for failure in publication.failures
                    ],
                )


# ---------------------------------------------------------------------------
# Claim statements
# ---------------------------------------------------------------------------
# Rows handed to a crawler are locked with SKIP LOCKED so that concurrent
# crawlers pick disjoint batches.  Dialects without row locks (SQLite) drop
# the clause.


def select_events_to_publish(limit: int) -> Select[Any]:
    """Events due for delivery: to-republish, then never-published and not quarantined."""
    return (
        select(outbox_t)
        .where(
            or_(
                outbox_t.c.status == EventStatus.TO_REPUBLISH.value,
                and_(
                    outbox_t.c.status == EventStatus.NEVER_PUBLISHED.value,
                    outbox_t.c.was_quarantined.is_(False),
                ),
            )
        )
        .order_by(
            outbox_t.c.priority.is_(None),
            outbox_t.c.priority,
            outbox_t.c.occurred_at,
        )
        .limit(limit)
        .with_for_update(skip_locked=True)
    )


def select_failed_events(limit: int) -> Select[Any]:
    return (
        select(outbox_t)
        .where(
            and_(
                outbox_t.c.status == EventStatus.FAILED_BUT_WILL_RETRY.value,
                outbox_t.c.was_quarantined.is_(False),
            )
        )
        .order_by(outbox_t.c.occurred_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )


def select_stale_in_process_events(claimed_before: datetime, limit: int) -> Select[Any]:
    return (
        select(outbox_t)
        .where(
            and_(
                outbox_t.c.status == EventStatus.IN_PROCESS.value,
                or_(
                    outbox_t.c.claimed_at.is_(None),
                    outbox_t.c.claimed_at < _as_utc(claimed_before),
                ),
            )
        )
        .order_by(outbox_t.c.occurred_at)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )


class SqlAlchemyOutboxQueries(OutboxQueries):
    """Crawler reads; events come back with their full publication history."""

    def __init__(self, session: AsyncSession, catalogue: TopicCatalogue | None = None) -> None:
        self._session = session
        self._codec = _PayloadCodec(catalogue)

    async def find_by_status(
        self,
        statuses: Iterable[EventStatus],
        limit: int | None = None,
    ) -> list[DomainEvent]:
        values = [EventStatus(status).value for status in statuses]
        stmt = select(outbox_t).where(outbox_t.c.status.in_(values)).order_by(outbox_t.c.occurred_at)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._load(stmt)

    async def get_events_to_publish(self, limit: int) -> list[DomainEvent]:
        return await self._load(select_events_to_publish(limit))

    async def get_failed_events(self, limit: int) -> list[DomainEvent]:
        return await self._load(select_failed_events(limit), publications_by_date=True)

    async def get_stale_in_process_events(
        self, claimed_before: datetime, limit: int
    ) -> list[DomainEvent]:
        return await self._load(select_stale_in_process_events(claimed_before, limit))

    async def _load(
        self,
        stmt: Select[Any],
        *,
        publications_by_date: bool = False,
    ) -> list[DomainEvent]:
        with translate_errors("query"):
            rows = (await self._session.execute(stmt)).fetchall()
            if not rows:
                return []
            publications = await self._load_publications(
                [row.id for row in rows], by_date=publications_by_date
            )

        return [
            DomainEvent(
                id=row.id,
                topic=row.topic,
                payload=self._codec.decode(row.topic, row.payload),
                occurred_at=_as_utc(row.occurred_at),
                publications=tuple(publications.get(row.id, ())),
                status=EventStatus(row.status),
                was_quarantined=bool(row.was_quarantined),
                priority=row.priority,
            )
            for row in rows
        ]

    async def _load_publications(
        self, event_ids: list[str], *, by_date: bool
    ) -> dict[str, list[EventPublication]]:
        order = (
            (publications_t.c.published_at, publications_t.c.id) if by_date else (publications_t.c.id,)
        )
        publication_rows = (
            await self._session.execute(
                select(publications_t)
                .where(publications_t.c.event_id.in_(event_ids))
                .order_by(*order)
            )
        ).fetchall()
        if not publication_rows:
            return {}

        failure_rows = (
            await self._session.execute(
                select(failures_t)
                .where(failures_t.c.publication_id.in_([row.id for row in publication_rows]))
                .order_by(failures_t.c.id)
            )
        ).fetchall()
        failures: dict[int, list[EventFailure]] = {}
        for row in failure_rows:
            failures.setdefault(row.publication_id, []).append(
                EventFailure(row.subscription_id, row.error_message)
            )

        publications: dict[str, list[EventPublication]] = {}
        for row in publication_rows:
            publications.setdefault(row.event_id, []).append(
                EventPublication(
                    published_at=_as_utc(row.published_at),
                    failures=tuple(failures.get(row.id, ())),
                )
            )
        return publications


__all__ = [
    "SqlAlchemyOutboxQueries",
    "SqlAlchemyOutboxRepository",
    "select_events_to_publish",
    "select_failed_events",
    "select_stale_in_process_events",
    "translate_errors",
]
