"""Unit tests for the unit of work handle, performer and transactional decorator."""

from __future__ import annotations

import asyncio

import pytest

from mp_outbox.adapters.in_memory import InMemoryRepository, InMemoryUowPerformer, create_in_memory_uow
from mp_outbox.application.uow import UnitOfWork, transactional
from mp_outbox.kernel.errors import DomainError, DuplicateEventIdError
from mp_outbox.kernel.events import DomainEvent, EventFactory
from mp_outbox.kernel.time import FrozenClock
from mp_outbox.testing import SequentialUuidGenerator, utc


def _uow() -> UnitOfWork:
    return create_in_memory_uow(conventions=InMemoryRepository[dict]("convention"))


# ---------------------------------------------------------------------------
# UnitOfWork handle
# ---------------------------------------------------------------------------


class TestUnitOfWork:
    def test_named_repositories_are_attributes(self) -> None:
        uow = _uow()
        assert uow.conventions is uow.repositories["conventions"]

    def test_unknown_repository_raises_attribute_error(self) -> None:
        with pytest.raises(AttributeError, match="agencies"):
            _uow().agencies  # noqa: B018

    def test_outbox_stores_are_always_present(self) -> None:
        uow = create_in_memory_uow()
        assert uow.outbox_repository is not None
        assert uow.outbox_queries is not None
        assert uow.repositories == {}


# ---------------------------------------------------------------------------
# InMemoryUowPerformer atomicity
# ---------------------------------------------------------------------------


class TestInMemoryUowPerformer:
    def test_commits_when_work_returns(self) -> None:
        uow = _uow()
        performer = InMemoryUowPerformer(uow)
        create_event = EventFactory(FrozenClock(), SequentialUuidGenerator())

        async def _work(uow: UnitOfWork) -> str:
            await uow.conventions.save("c-1", {"status": "submitted"})
            event = create_event("ConventionSubmitted", {"id": "c-1"})
            await uow.outbox_repository.save(event)
            return event.id

        event_id = asyncio.run(performer.perform(_work))

        assert event_id == "event-1"
        assert uow.conventions.items == {"c-1": {"status": "submitted"}}
        assert [e.id for e in uow.outbox_repository.events] == ["event-1"]

    def test_domain_write_is_rolled_back_when_saving_the_event_fails(self) -> None:
        uow = _uow()
        performer = InMemoryUowPerformer(uow)
        first = DomainEvent(id="dup", topic="A", payload={}, occurred_at=utc(2022, 1, 1))
        clash = DomainEvent(id="dup", topic="B", payload={}, occurred_at=utc(2022, 1, 1))
        asyncio.run(uow.outbox_repository.save(first))

        async def _work(uow: UnitOfWork) -> None:
            await uow.conventions.save("c-1", {"status": "submitted"})
            await uow.outbox_repository.save(clash)

        with pytest.raises(DuplicateEventIdError):
            asyncio.run(performer.perform(_work))

        assert uow.conventions.items == {}
        assert uow.outbox_repository.events == [first]

    def test_event_is_rolled_back_when_work_raises_afterwards(self) -> None:
        uow = _uow()
        performer = InMemoryUowPerformer(uow)

        async def _work(uow: UnitOfWork) -> None:
            await uow.outbox_repository.save(
                DomainEvent(id="e1", topic="A", payload={}, occurred_at=utc(2022, 1, 1))
            )
            raise DomainError("convention is not valid")

        with pytest.raises(DomainError):
            asyncio.run(performer.perform(_work))

        assert uow.outbox_repository.events == []

    def test_rollback_restores_mutated_aggregates(self) -> None:
        uow = _uow()
        performer = InMemoryUowPerformer(uow)
        asyncio.run(uow.conventions.save("c-1", {"status": "draft"}))

        async def _work(uow: UnitOfWork) -> None:
            convention = await uow.conventions.get("c-1")
            convention["status"] = "validated"
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            asyncio.run(performer.perform(_work))

        assert uow.conventions.items == {"c-1": {"status": "draft"}}

    def test_performing_does_not_publish(self) -> None:
        uow = _uow()
        performer = InMemoryUowPerformer(uow)

        async def _work(uow: UnitOfWork) -> None:
            await uow.outbox_repository.save(
                DomainEvent(id="e1", topic="A", payload={}, occurred_at=utc(2022, 1, 1))
            )

        asyncio.run(performer.perform(_work))

        (stored,) = uow.outbox_repository.events
        assert stored.publications == ()
        assert stored.status.value == "never-published"


# ---------------------------------------------------------------------------
# @transactional
# ---------------------------------------------------------------------------


class SubmitConvention:
    def __init__(self, uow_performer: InMemoryUowPerformer, create_event: EventFactory) -> None:
        self._uow_performer = uow_performer
        self._create_event = create_event

    @transactional()
    async def execute(self, uow: UnitOfWork, convention_id: str, *, fail: bool = False) -> str:
        await uow.conventions.save(convention_id, {"id": convention_id})
        event = self._create_event("ConventionSubmitted", {"id": convention_id})
        await uow.outbox_repository.save(event)
        if fail:
            raise DomainError("rejected")
        return event.id


class TestTransactionalDecorator:
    def _use_case(self) -> tuple[SubmitConvention, UnitOfWork]:
        uow = _uow()
        create_event = EventFactory(FrozenClock(), SequentialUuidGenerator())
        return SubmitConvention(InMemoryUowPerformer(uow), create_event), uow

    def test_injects_the_handle_and_returns_the_result(self) -> None:
        use_case, uow = self._use_case()

        result = asyncio.run(use_case.execute("c-1"))

        assert result == "event-1"
        assert list(uow.conventions.items) == ["c-1"]
        assert len(uow.outbox_repository.events) == 1

    def test_rolls_back_on_error(self) -> None:
        use_case, uow = self._use_case()

        with pytest.raises(DomainError, match="rejected"):
            asyncio.run(use_case.execute("c-1", fail=True))

        assert uow.conventions.items == {}
        assert uow.outbox_repository.events == []

    def test_preserves_the_method_name(self) -> None:
        assert SubmitConvention.execute.__name__ == "execute"

    def test_custom_performer_attribute(self) -> None:
        uow = _uow()

        class UseCase:
            def __init__(self) -> None:
                self.performer = InMemoryUowPerformer(uow)

            @transactional("performer")
            async def run(self, uow: UnitOfWork) -> int:
                return len(uow.outbox_repository.events)

        assert asyncio.run(UseCase().run()) == 0
