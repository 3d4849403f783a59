"""Application UoW – transactional decorator."""
from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from mp_outbox.application.uow.unit_of_work import UnitOfWork, UnitOfWorkPerformer

F = TypeVar("F", bound=Callable[..., Any])


def transactional(performer_attribute: str = "_uow_performer") -> Callable[[F], F]:
    """Decorator: run an async method inside ``perform`` and inject the handle.

    The decorated method takes the :class:`UnitOfWork` as its first argument
    after ``self``; callers do not pass it::

        class SubmitConvention:
            def __init__(self, uow_performer, create_event): ...

            @transactional()
            async def execute(self, uow: UnitOfWork, convention: Convention) -> None:
                await uow.conventions.save(convention)
                await uow.outbox_repository.save(self._create_event("ConventionSubmitted", convention))

        await SubmitConvention(performer, create_event).execute(convention)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            performer: UnitOfWorkPerformer = getattr(self, performer_attribute)

            async def work(uow: UnitOfWork) -> Any:
                return await func(self, uow, *args, **kwargs)

            return await performer.perform(work)

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["transactional"]
