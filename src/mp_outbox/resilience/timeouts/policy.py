"""Resilience – TimeoutPolicy."""
from __future__ import annotations

import asyncio
import dataclasses
import inspect
from typing import Any, Awaitable, Callable, TypeVar

from mp_outbox.kernel.errors import InfrastructureTimeoutError

T = TypeVar("T")


@dataclasses.dataclass
class TimeoutPolicy:
    """Configuration for timeout enforcement."""
    timeout_seconds: float

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise InfrastructureTimeoutError(
                f"Operation timed out after {self.timeout_seconds}s"
            ) from exc

    def wrap(self, callback: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
        """Return an async callable applying this policy to *callback*.

        Sync callbacks are supported; only awaitable results can be cut short.
        """

        async def _guarded(*args: Any, **kwargs: Any) -> Any:
            async def _call() -> Any:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    return await result
                return result

            return await self.execute(_call)

        return _guarded


__all__ = ["TimeoutPolicy"]
