"""Event crawler – periodic, single-flight republish driver."""
from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from datetime import timedelta

from mp_outbox.application.events.bus import EventBus
from mp_outbox.application.outbox import OutboxQueries
from mp_outbox.application.uow import UnitOfWork, UnitOfWorkPerformer
from mp_outbox.kernel.errors import BaseError
from mp_outbox.kernel.events import DomainEvent, EventStatus
from mp_outbox.kernel.time import Clock, SystemClock
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)

Fetch = Callable[[OutboxQueries], Awaitable[list[DomainEvent]]]


def status_before_claim(event: DomainEvent) -> EventStatus:
    """The queue an ``in-process`` event goes back to when its claim is dropped."""
    if event.was_quarantined:
        return EventStatus.TO_REPUBLISH
    last = event.last_publication
    if last is None:
        return EventStatus.NEVER_PUBLISHED
    if last.has_failures:
        return EventStatus.FAILED_BUT_WILL_RETRY
    return EventStatus.TO_REPUBLISH


class EventCrawler:
    """Feed pending outbox events to the event bus.

    Each batch is claimed (marked ``in-process``) in its own unit of work
    before delivery.  Within one process ticks are single-flight, so an event
    is never scheduled twice.  Across workers the claim query takes row locks
    with ``SKIP LOCKED`` on databases that support it (PostgreSQL, MySQL 8);
    on SQLite two crawler processes may pick the same batch.

    Claimed events that are never delivered go back to their queue: on a
    delivery error, on cancellation (``stop()`` past its timeout), and, when
    ``claim_lease_seconds`` is set, once a claim is older than the lease
    (the worker holding it died).  The crawler keeps no state between ticks;
    everything lives in the outbox store.

    Example::

        crawler = EventCrawler(uow_performer, event_bus, period_seconds=10)
        await crawler.start()
        ...
        await crawler.stop()
    """

    def __init__(
        self,
        uow_performer: UnitOfWorkPerformer,
        event_bus: EventBus,
        *,
        batch_size: int = 100,
        max_concurrency: int = 10,
        period_seconds: float = 0.0,
        shutdown_timeout: float = 30.0,
        claim_lease_seconds: float | None = None,
        clock: Clock | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if claim_lease_seconds is not None and claim_lease_seconds < 0:
            raise ValueError("claim_lease_seconds must be >= 0")
        self._uow_performer = uow_performer
        self._event_bus = event_bus
        self._clock = clock or SystemClock()
        self.batch_size = batch_size
        self.max_concurrency = max_concurrency
        self.period_seconds = period_seconds
        self.shutdown_timeout = shutdown_timeout
        self.claim_lease_seconds = claim_lease_seconds

        self._tick_lock = asyncio.Lock()
        self._stop_requested: asyncio.Event | None = None
        self._task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Single tick
    # ------------------------------------------------------------------

    async def process_new_events(self) -> int:
        """Publish ``never-published`` and ``to-republish`` events."""
        return await self._crawl(
            "new", lambda queries: queries.get_events_to_publish(self.batch_size)
        )

    async def retry_failed_events(self) -> int:
        """Re-publish ``failed-but-will-retry`` events."""
        return await self._crawl(
            "failed", lambda queries: queries.get_failed_events(self.batch_size)
        )

    async def reclaim_stale_events(self) -> int:
        """Return events whose claim outlived the lease to their queue."""
        if not self.claim_lease_seconds:
            return 0
        claimed_before = self._clock.now() - timedelta(seconds=self.claim_lease_seconds)

        async def _reclaim(uow: UnitOfWork) -> list[DomainEvent]:
            events = await uow.outbox_queries.get_stale_in_process_events(
                claimed_before, self.batch_size
            )
            for event in events:
                await uow.outbox_repository.save(event.with_status(status_before_claim(event)))
            return events

        events = await self._uow_performer.perform(_reclaim)
        if events:
            logger.warning(
                "crawler_reclaimed",
                events=len(events),
                event_ids=[event.id for event in events],
                claimed_before=claimed_before.isoformat(),
            )
        return len(events)

    async def tick(self) -> int:
        """Run one crawl; returns immediately when a tick is already running.

        Retries run before new events, so an event that fails its first
        delivery waits for the next tick.
        """
        if self._tick_lock.locked():
            logger.info("crawler_tick_skipped", reason="previous tick still running")
            return 0
        async with self._tick_lock:
            await self.reclaim_stale_events()
            retried = await self.retry_failed_events()
            return retried + await self.process_new_events()

    async def _crawl(self, kind: str, fetch: Fetch) -> int:
        claimed_at = self._clock.now()

        async def _claim(uow: UnitOfWork) -> list[DomainEvent]:
            events = await fetch(uow.outbox_queries)
            await uow.outbox_repository.mark_events_as_in_process(events, claimed_at=claimed_at)
            return events

        events = await self._uow_performer.perform(_claim)
        if not events:
            return 0

        logger.info("crawler_batch", kind=kind, events=len(events))
        semaphore = asyncio.Semaphore(self.max_concurrency)
        pending = {event.id: event for event in events}

        async def _publish(event: DomainEvent) -> None:
            async with semaphore:
                await self._publish_one(event)
            del pending[event.id]

        try:
            await asyncio.gather(*(_publish(event) for event in events))
        except asyncio.CancelledError:
            if pending:
                logger.warning("crawler_publish_cancelled", kind=kind, events=len(pending))
                await asyncio.shield(self._release(*pending.values()))
            raise
        return len(events)

    async def _publish_one(self, event: DomainEvent) -> None:
        try:
            await self._event_bus.publish(event)
        except Exception as exc:
            context = exc.log_context() if isinstance(exc, BaseError) else {}
            logger.exception(
                "crawler_publish_failed", event_id=event.id, topic=event.topic, **context
            )
            await self._release(event)

    async def _release(self, *events: DomainEvent) -> None:
        """Put events whose delivery could not be recorded back in their queue.

        The copies saved are the ones fetched before the claim, so each
        event keeps the status and publications it had.
        """

        async def _restore(uow: UnitOfWork) -> None:
            for event in events:
                await uow.outbox_repository.save(event)

        try:
            await self._uow_performer.perform(_restore)
        except Exception:
            logger.exception("crawler_release_failed", event_ids=[event.id for event in events])
        else:
            logger.info("crawler_released", event_ids=[event.id for event in events])

    # ------------------------------------------------------------------
    # Background loop
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            logger.warning("crawler_already_running")
            return
        if self.period_seconds <= 0:
            logger.info("crawler_disabled", period_seconds=self.period_seconds)
            return
        self._stop_requested = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "crawler_started",
            period_seconds=self.period_seconds,
            batch_size=self.batch_size,
            max_concurrency=self.max_concurrency,
        )

    async def stop(self) -> None:
        """Stop the loop, letting the current tick finish."""
        if self._task is None:
            return
        assert self._stop_requested is not None
        self._stop_requested.set()
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=self.shutdown_timeout)
        except TimeoutError:
            logger.warning("crawler_shutdown_timed_out")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None
        logger.info("crawler_stopped")

    async def _run_loop(self) -> None:
        assert self._stop_requested is not None
        while not self._stop_requested.is_set():
            try:
                await self.tick()
            except Exception:
                logger.exception("crawler_tick_failed")
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(self._stop_requested.wait(), timeout=self.period_seconds)


__all__ = ["EventCrawler", "status_before_claim"]
