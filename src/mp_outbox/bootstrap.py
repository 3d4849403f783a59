"""Startup wiring – settings, subscriptions, bus and crawler in one place."""
from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from mp_outbox.adapters.sqlalchemy import (
    RepositoriesFactory,
    SqlAlchemySessionFactory,
    SqlAlchemyUowPerformer,
)
from mp_outbox.application.events import (
    EventCrawler,
    OutboxEventBus,
    SubscriptionRegistry,
    SubscriptionSpec,
)
from mp_outbox.application.uow import UnitOfWorkPerformer
from mp_outbox.config import OutboxSettings
from mp_outbox.kernel.events import EventFactory, TopicCatalogue
from mp_outbox.kernel.time import Clock, SystemClock
from mp_outbox.kernel.types import RandomUuidGenerator, UuidGenerator
from mp_outbox.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


@dataclasses.dataclass
class OutboxEngine:
    """Everything a process needs to emit and deliver outbox events."""

    settings: OutboxSettings
    uow_performer: UnitOfWorkPerformer
    create_event: EventFactory
    subscriptions: SubscriptionRegistry
    event_bus: OutboxEventBus
    crawler: EventCrawler
    session_factory: SqlAlchemySessionFactory | None = None

    async def start(self) -> None:
        if self.session_factory is not None:
            await self.session_factory.create_tables()
        await self.crawler.start()

    async def stop(self) -> None:
        await self.crawler.stop()
        if self.session_factory is not None:
            await self.session_factory.dispose()


def build_outbox_engine(
    settings: OutboxSettings,
    subscriptions: Iterable[SubscriptionSpec] = (),
    *,
    uow_performer: UnitOfWorkPerformer | None = None,
    repositories_factory: RepositoriesFactory | None = None,
    catalogue: TopicCatalogue | None = None,
    clock: Clock | None = None,
    uuid_generator: UuidGenerator | None = None,
    configure_logs: bool = False,
) -> OutboxEngine:
    """Assemble the outbox engine.

    Without an explicit *uow_performer* the SQLAlchemy store at
    ``settings.database_url`` is used.  *subscriptions* is the static
    ``(topic, subscription_id, callback)`` wiring contributed by each business
    module; it is registered once, here.

    With *configure_logs* the process-wide structlog setup is applied at
    ``settings.log_level``.
    """
    if configure_logs:
        configure_logging(settings.log_level)
    clock = clock or SystemClock()
    session_factory: SqlAlchemySessionFactory | None = None
    if uow_performer is None:
        session_factory = SqlAlchemySessionFactory(settings.database_url)
        uow_performer = SqlAlchemyUowPerformer(
            session_factory,
            repositories_factory=repositories_factory,
            catalogue=catalogue,
        )

    registry = SubscriptionRegistry.from_subscriptions(
        subscriptions,
        default_timeout=settings.subscriber_timeout,
        catalogue=catalogue,
    )
    event_bus = OutboxEventBus(clock, uow_performer, registry)
    crawler = EventCrawler(
        uow_performer,
        event_bus,
        batch_size=settings.crawler_batch_size,
        max_concurrency=settings.crawler_max_concurrency,
        period_seconds=settings.crawler_period_seconds,
        claim_lease_seconds=settings.crawler_claim_lease_seconds or None,
        clock=clock,
    )
    create_event = EventFactory(
        clock,
        uuid_generator or RandomUuidGenerator(),
        quarantined_topics=settings.quarantined_topics,
        catalogue=catalogue,
    )
    logger.info(
        "outbox_engine_built",
        subscriptions=len(registry),
        quarantined_topics=sorted(create_event.quarantined_topics),
        crawler_enabled=settings.crawler_enabled,
    )
    return OutboxEngine(
        settings=settings,
        uow_performer=uow_performer,
        create_event=create_event,
        subscriptions=registry,
        event_bus=event_bus,
        crawler=crawler,
        session_factory=session_factory,
    )


__all__ = ["OutboxEngine", "build_outbox_engine"]
