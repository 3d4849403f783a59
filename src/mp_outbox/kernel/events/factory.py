"""EventFactory – the single way use cases create outbox events."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from mp_outbox.kernel.events.event import (
    DomainEvent,
    EventPublication,
    EventStatus,
    Topic,
)
from mp_outbox.kernel.events.topics import TopicCatalogue
from mp_outbox.kernel.time import Clock
from mp_outbox.kernel.types import UuidGenerator


class EventFactory:
    """Build fully-formed :class:`DomainEvent` values with a fresh id.

    ``quarantined_topics`` is the administrative denylist: events created on
    one of those topics start with ``was_quarantined=True`` and are skipped by
    the crawler until an operator forces them to ``to-republish``.

    Example::

        create_event = EventFactory(SystemClock(), RandomUuidGenerator())

        async def work(uow: UnitOfWork) -> None:
            await uow.repositories["conventions"].save(convention)
            await uow.outbox_repository.save(
                create_event("ConventionSubmitted", {"id": convention.id})
            )

        await uow_performer.perform(work)
    """

    def __init__(
        self,
        clock: Clock,
        uuid_generator: UuidGenerator,
        quarantined_topics: Iterable[Topic] = (),
        catalogue: TopicCatalogue | None = None,
    ) -> None:
        self._clock = clock
        self._uuid_generator = uuid_generator
        self._quarantined_topics = frozenset(quarantined_topics)
        self._catalogue = catalogue

    @property
    def quarantined_topics(self) -> frozenset[Topic]:
        return self._quarantined_topics

    def __call__(
        self,
        topic: Topic,
        payload: Any,
        *,
        occurred_at: datetime | None = None,
        was_quarantined: bool | None = None,
        publications: Iterable[EventPublication] = (),
        status: EventStatus = EventStatus.NEVER_PUBLISHED,
        priority: int | None = None,
    ) -> DomainEvent:
        if self._catalogue is not None:
            self._catalogue.validate(topic, payload)
        return DomainEvent(
            id=self._uuid_generator.new(),
            topic=topic,
            payload=payload,
            occurred_at=occurred_at or self._clock.now(),
            publications=tuple(publications),
            status=status,
            was_quarantined=(
                topic in self._quarantined_topics if was_quarantined is None else was_quarantined
            ),
            priority=priority,
        )


__all__ = ["EventFactory"]
