"""In-memory adapter – keyed aggregate store taking part in rollbacks."""
from __future__ import annotations

import copy
from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from mp_outbox.kernel.errors import NotFoundError

T = TypeVar("T")


@runtime_checkable
class Snapshottable(Protocol):
    """A store whose state can be captured before and restored after a failed unit of work."""

    def snapshot(self) -> Any: ...
    def restore(self, snapshot: Any) -> None: ...


class InMemoryRepository(Generic[T]):
    """Dict-backed store for aggregates written alongside events."""

    def __init__(self, name: str = "aggregate") -> None:
        self.name = name
        self._items: dict[str, T] = {}

    async def save(self, key: str, item: T) -> None:
        self._items[key] = item

    async def get(self, key: str) -> T:
        try:
            return self._items[key]
        except KeyError:
            raise NotFoundError(self.name, key) from None

    async def find(self, key: str) -> T | None:
        return self._items.get(key)

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)

    @property
    def items(self) -> dict[str, T]:
        return dict(self._items)

    def snapshot(self) -> dict[str, T]:
        return copy.deepcopy(self._items)

    def restore(self, snapshot: dict[str, T]) -> None:
        self._items = snapshot


__all__ = ["InMemoryRepository", "Snapshottable"]
