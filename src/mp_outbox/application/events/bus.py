"""Event bus – at-least-once delivery of outbox events to subscribers."""
from __future__ import annotations

import asyncio
from typing import Any, Protocol

from mp_outbox.application.events.subscriptions import Subscription, SubscriptionRegistry
from mp_outbox.application.uow import UnitOfWork, UnitOfWorkPerformer
from mp_outbox.kernel.events import (
    DomainEvent,
    EventFailure,
    EventPublication,
    EventStatus,
)
from mp_outbox.kernel.time import Clock
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)

#: Publications (first attempt included) after which a failing event is quarantined.
MAX_PUBLICATION_ATTEMPTS = 4


class EventBus(Protocol):
    """Port: deliver one event and persist the outcome."""

    async def publish(self, event: DomainEvent) -> DomainEvent: ...


class OutboxEventBus:
    """Deliver events to the subscribers registered for their topic.

    A first delivery (or a forced ``to-republish``) runs every subscriber.
    A retry only runs the subscribers listed as failed in the latest
    publication, so subscribers that already succeeded never see the event
    twice.  Subscriber errors are recorded on the event; only a failure to
    persist the outcome escapes :meth:`publish`.

    Concurrent ``publish`` calls for the same event id are not safe; the
    crawler marks events ``in-process`` so that a single worker owns them.
    """

    def __init__(
        self,
        clock: Clock,
        uow_performer: UnitOfWorkPerformer,
        subscriptions: SubscriptionRegistry,
        *,
        max_attempts: int = MAX_PUBLICATION_ATTEMPTS,
    ) -> None:
        self._clock = clock
        self._uow_performer = uow_performer
        self._subscriptions = subscriptions
        self._max_attempts = max_attempts

    async def publish(self, event: DomainEvent) -> DomainEvent:
        published_at = self._clock.now()
        log = logger.bind(event_id=event.id, topic=event.topic)

        subscriptions = self._subscriptions_to_run(event)
        outcomes = await asyncio.gather(
            *(self._invoke(subscription, event, log) for subscription in subscriptions)
        )
        publication = EventPublication(
            published_at=published_at,
            failures=tuple(failure for failure in outcomes if failure is not None),
        )
        updated = self._record(event, publication)

        async def _save(uow: UnitOfWork) -> None:
            await uow.outbox_repository.save(updated)

        await self._uow_performer.perform(_save)

        if updated.status is EventStatus.FAILED_TOO_MANY_TIMES:
            log.error(
                "event_quarantined",
                attempts=len(updated.publications),
                failed_subscriptions=sorted(f.subscription_id for f in publication.failures),
            )
        else:
            log.debug(
                "event_published",
                status=updated.status.value,
                subscribers=len(subscriptions),
                failures=len(publication.failures),
            )
        return updated

    def _subscriptions_to_run(self, event: DomainEvent) -> list[Subscription]:
        subscriptions = self._subscriptions.subscribers_for(event.topic)
        if not event.publications or event.status is EventStatus.TO_REPUBLISH:
            return subscriptions
        failed_ids = event.last_failed_subscription_ids
        return [s for s in subscriptions if s.subscription_id in failed_ids]

    async def _invoke(
        self,
        subscription: Subscription,
        event: DomainEvent,
        log: Any,
    ) -> EventFailure | None:
        try:
            await subscription.invoke(event)
        except Exception as exc:  # noqa: BLE001
            error_message = str(exc) or type(exc).__name__
            log.warning(
                "subscriber_failed",
                subscription_id=subscription.subscription_id,
                error_message=error_message,
                exc_info=exc,
            )
            return EventFailure(subscription.subscription_id, error_message)
        return None

    def _record(self, event: DomainEvent, publication: EventPublication) -> DomainEvent:
        attempts = len(event.publications) + 1
        if not publication.has_failures:
            status = EventStatus.PUBLISHED
            was_quarantined = event.was_quarantined
        elif attempts >= self._max_attempts:
            status = EventStatus.FAILED_TOO_MANY_TIMES
            was_quarantined = True
        else:
            status = EventStatus.FAILED_BUT_WILL_RETRY
            was_quarantined = event.was_quarantined
        return event.with_publication(publication, status=status, was_quarantined=was_quarantined)


__all__ = ["MAX_PUBLICATION_ATTEMPTS", "EventBus", "OutboxEventBus"]
