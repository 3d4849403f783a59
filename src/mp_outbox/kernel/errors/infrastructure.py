"""Infrastructure errors – I/O failures, external integrations."""

from __future__ import annotations

from mp_outbox.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class TimeoutError(InfrastructureError):  # noqa: A001
    """An I/O operation exceeded its deadline."""

    default_code = "infrastructure_timeout"


class OutboxStoreError(InfrastructureError):
    """The outbox store could not be read or written."""

    default_code = "outbox_store_error"


__all__ = [
    "InfrastructureError",
    "OutboxStoreError",
    "TimeoutError",
]
