"""Unit tests for TimeoutPolicy."""

from __future__ import annotations

import asyncio

import pytest

from mp_outbox.kernel.errors import InfrastructureTimeoutError
from mp_outbox.resilience.timeouts import TimeoutPolicy


class TestTimeoutPolicy:
    def test_fast_call_returns_result(self) -> None:
        async def fast() -> str:
            return "done"

        assert asyncio.run(TimeoutPolicy(1.0).execute(fast)) == "done"

    def test_slow_call_raises_infrastructure_timeout(self) -> None:
        async def slow() -> None:
            await asyncio.sleep(5)

        with pytest.raises(InfrastructureTimeoutError, match="timed out after 0.01s"):
            asyncio.run(TimeoutPolicy(0.01).execute(slow))

    @pytest.mark.parametrize("timeout", [0, -1.0])
    def test_rejects_non_positive_timeouts(self, timeout: float) -> None:
        with pytest.raises(ValueError):
            TimeoutPolicy(timeout)


class TestTimeoutPolicyWrap:
    def test_wrapped_async_callback_receives_arguments(self) -> None:
        async def handler(value: int, *, factor: int) -> int:
            return value * factor

        guarded = TimeoutPolicy(1.0).wrap(handler)

        assert asyncio.run(guarded(3, factor=2)) == 6

    def test_wrapped_sync_callback(self) -> None:
        guarded = TimeoutPolicy(1.0).wrap(lambda value: value + 1)
        assert asyncio.run(guarded(1)) == 2

    def test_wrapped_callback_errors_propagate(self) -> None:
        async def handler() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(TimeoutPolicy(1.0).wrap(handler)())

    def test_wrapped_slow_callback_times_out(self) -> None:
        async def handler() -> None:
            await asyncio.sleep(5)

        with pytest.raises(InfrastructureTimeoutError):
            asyncio.run(TimeoutPolicy(0.01).wrap(handler)())
