"""Unit of Work – transaction-scoped handle and the port that runs it."""
from __future__ import annotations

import abc
import dataclasses
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from mp_outbox.application.outbox import OutboxQueries, OutboxRepository

T = TypeVar("T")


@dataclasses.dataclass
class UnitOfWork:
    """Every store a use case may touch inside one transaction.

    Aggregate stores are registered by name in ``repositories`` and are also
    reachable as attributes::

        await uow.conventions.save(convention)
        await uow.outbox_repository.save(event)
    """

    outbox_repository: OutboxRepository
    outbox_queries: OutboxQueries
    repositories: dict[str, Any] = dataclasses.field(default_factory=dict)

    def __getattr__(self, name: str) -> Any:
        repositories = self.__dict__.get("repositories", {})
        try:
            return repositories[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no store named '{name}'") from None


#: A use case body run inside one transaction.
Work = Callable[[UnitOfWork], Awaitable[T]]


class UnitOfWorkPerformer(abc.ABC):
    """Port: run *work* atomically.

    Commits when *work* returns, rolls back and re-raises when it raises,
    including errors raised while saving the event.  Performing a unit of
    work never publishes events.
    """

    @abc.abstractmethod
    async def perform(self, work: Work[T]) -> T: ...


__all__ = ["UnitOfWork", "UnitOfWorkPerformer", "Work"]
