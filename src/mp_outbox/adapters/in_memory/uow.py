"""In-memory adapter – unit of work with snapshot rollback."""
from __future__ import annotations

import asyncio
from typing import Any, TypeVar

from mp_outbox.adapters.in_memory.outbox import InMemoryOutboxQueries, InMemoryOutboxRepository
from mp_outbox.adapters.in_memory.repository import Snapshottable
from mp_outbox.application.uow import UnitOfWork, UnitOfWorkPerformer, Work

T = TypeVar("T")


def create_in_memory_uow(**repositories: Any) -> UnitOfWork:
    """Build a handle over a fresh in-memory outbox plus the given named stores."""
    outbox_repository = InMemoryOutboxRepository()
    return UnitOfWork(
        outbox_repository=outbox_repository,
        outbox_queries=InMemoryOutboxQueries(outbox_repository),
        repositories=dict(repositories),
    )


class InMemoryUowPerformer(UnitOfWorkPerformer):
    """Run work against one shared in-memory handle.

    Performs are serialised; when the work raises, every snapshottable store
    is restored to its state from before the work started, so a domain write
    never survives without its event.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self.uow = uow
        self._lock = asyncio.Lock()

    async def perform(self, work: Work[T]) -> T:
        async with self._lock:
            stores = self._stores()
            snapshots = [(store, store.snapshot()) for store in stores]
            try:
                return await work(self.uow)
            except BaseException:
                for store, snapshot in snapshots:
                    store.restore(snapshot)
                raise

    def _stores(self) -> list[Snapshottable]:
        candidates = [
            self.uow.outbox_repository,
            self.uow.outbox_queries,
            *self.uow.repositories.values(),
        ]
        seen: set[int] = set()
        stores: list[Snapshottable] = []
        for candidate in candidates:
            if isinstance(candidate, Snapshottable) and id(candidate) not in seen:
                seen.add(id(candidate))
                stores.append(candidate)
        return stores


__all__ = ["InMemoryUowPerformer", "create_in_memory_uow"]
