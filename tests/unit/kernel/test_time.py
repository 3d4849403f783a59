"""Unit tests for kernel time utilities."""

from __future__ import annotations

from datetime import UTC, datetime

from mp_outbox.kernel.time import Clock, FrozenClock, SystemClock, utc_now


# ---------------------------------------------------------------------------
# SystemClock
# ---------------------------------------------------------------------------


class TestSystemClock:
    def test_now_returns_utc_aware_datetime(self) -> None:
        result = SystemClock().now()
        assert isinstance(result, datetime)
        assert result.tzinfo == UTC

    def test_satisfies_clock_protocol(self) -> None:
        clock: Clock = SystemClock()
        assert clock.now() <= utc_now()


# ---------------------------------------------------------------------------
# FrozenClock
# ---------------------------------------------------------------------------


class TestFrozenClock:
    def test_default_instant(self) -> None:
        assert FrozenClock().now() == datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def test_returns_the_same_instant(self) -> None:
        clock = FrozenClock(datetime(2022, 1, 1, tzinfo=UTC))
        assert clock.now() == clock.now() == datetime(2022, 1, 1, tzinfo=UTC)

    def test_set(self) -> None:
        clock = FrozenClock()
        clock.set(datetime(2022, 2, 2, tzinfo=UTC))
        assert clock.now() == datetime(2022, 2, 2, tzinfo=UTC)

    def test_advance(self) -> None:
        clock = FrozenClock(datetime(2022, 1, 1, tzinfo=UTC))
        clock.advance(days=1, hours=2)
        assert clock.now() == datetime(2022, 1, 2, 2, 0, tzinfo=UTC)


class TestUtcNow:
    def test_is_aware(self) -> None:
        assert utc_now().tzinfo is UTC
