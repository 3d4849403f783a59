"""Application errors – orchestration-level failures."""

from __future__ import annotations

from mp_outbox.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Application-layer failure (configuration, orchestration)."""

    default_code = "application_error"


__all__ = ["ApplicationError"]
