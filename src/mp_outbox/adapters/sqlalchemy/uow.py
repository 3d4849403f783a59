"""SQLAlchemy adapter – SqlAlchemyUowPerformer."""
from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from mp_outbox.adapters.sqlalchemy.outbox import (
    SqlAlchemyOutboxQueries,
    SqlAlchemyOutboxRepository,
    translate_errors,
)
from mp_outbox.application.uow import UnitOfWork, UnitOfWorkPerformer, Work
from mp_outbox.kernel.events import TopicCatalogue

T = TypeVar("T")

#: Builds the aggregate stores of a unit of work from its session.
RepositoriesFactory = Callable[[AsyncSession], dict[str, Any]]


class SqlAlchemyUowPerformer(UnitOfWorkPerformer):
    """One session and one transaction per ``perform`` call.

    Every store in the handle, outbox included, is bound to the same session,
    so domain rows and outbox rows commit or roll back together.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        *,
        repositories_factory: RepositoriesFactory | None = None,
        catalogue: TopicCatalogue | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repositories_factory = repositories_factory
        self._catalogue = catalogue

    def create_uow(self, session: AsyncSession) -> UnitOfWork:
        return UnitOfWork(
            outbox_repository=SqlAlchemyOutboxRepository(session, self._catalogue),
            outbox_queries=SqlAlchemyOutboxQueries(session, self._catalogue),
            repositories=self._repositories_factory(session) if self._repositories_factory else {},
        )

    async def perform(self, work: Work[T]) -> T:
        session = self._session_factory()
        try:
            result = await work(self.create_uow(session))
            with translate_errors("commit"):
                await session.commit()
            return result
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()


__all__ = ["RepositoriesFactory", "SqlAlchemyUowPerformer"]
