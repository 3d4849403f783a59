"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError          (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   ├── UnknownTopicError
    │   └── ConflictError
    │       └── DuplicateEventIdError
    ├── ApplicationError     (application.py)
    └── InfrastructureError  (infrastructure.py)
        ├── TimeoutError
        └── OutboxStoreError

Only infrastructure errors escape ``EventBus.publish``; subscriber errors are
recorded on the event as data.
"""

from mp_outbox.kernel.errors.application import ApplicationError
from mp_outbox.kernel.errors.base import BaseError
from mp_outbox.kernel.errors.domain import (
    ConflictError,
    DomainError,
    DuplicateEventIdError,
    NotFoundError,
    UnknownTopicError,
    ValidationError,
)
from mp_outbox.kernel.errors.infrastructure import (
    InfrastructureError,
    OutboxStoreError,
)
from mp_outbox.kernel.errors.infrastructure import TimeoutError as InfrastructureTimeoutError

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConflictError",
    "DomainError",
    "DuplicateEventIdError",
    "InfrastructureError",
    "InfrastructureTimeoutError",
    "NotFoundError",
    "OutboxStoreError",
    "UnknownTopicError",
    "ValidationError",
]
