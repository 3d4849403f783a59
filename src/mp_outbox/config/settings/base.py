"""Config settings – Settings base class and OutboxSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from mp_outbox.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class OutboxSettings(Settings):
    """Outbox engine configuration, read from ``OUTBOX_*`` variables.

    ``crawler_period_seconds = 0`` disables the background crawler; events
    are then published only by explicit ``EventBus.publish`` calls.
    ``subscriber_timeout_seconds = 0`` means subscribers are never cut short.
    ``crawler_claim_lease_seconds = 0`` keeps claimed events ``in-process``
    until the worker holding them releases them.
    """

    _prefix: ClassVar[str] = "OUTBOX"

    database_url: str = "sqlite+aiosqlite:///:memory:"
    crawler_period_seconds: float = 0.0
    crawler_batch_size: int = 100
    crawler_max_concurrency: int = 10
    crawler_claim_lease_seconds: float = 300.0
    quarantined_topics: list[str] = dataclasses.field(default_factory=list)
    subscriber_timeout_seconds: float = 0.0
    log_level: str = "INFO"

    def _validate(self) -> None:
        if self.crawler_period_seconds < 0:
            raise InvalidSettingValueError(
                "crawler_period_seconds", self.crawler_period_seconds, "must be >= 0"
            )
        if self.crawler_batch_size < 1:
            raise InvalidSettingValueError(
                "crawler_batch_size", self.crawler_batch_size, "must be >= 1"
            )
        if self.crawler_max_concurrency < 1:
            raise InvalidSettingValueError(
                "crawler_max_concurrency", self.crawler_max_concurrency, "must be >= 1"
            )
        if self.crawler_claim_lease_seconds < 0:
            raise InvalidSettingValueError(
                "crawler_claim_lease_seconds", self.crawler_claim_lease_seconds, "must be >= 0"
            )
        if self.subscriber_timeout_seconds < 0:
            raise InvalidSettingValueError(
                "subscriber_timeout_seconds", self.subscriber_timeout_seconds, "must be >= 0"
            )

    @property
    def crawler_enabled(self) -> bool:
        return self.crawler_period_seconds > 0

    @property
    def subscriber_timeout(self) -> float | None:
        return self.subscriber_timeout_seconds or None


__all__ = ["OutboxSettings", "Settings"]
