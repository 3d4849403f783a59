"""Domain errors – rule violations and conflicting state."""

from __future__ import annotations

from typing import Any

from mp_outbox.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule is violated."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Input data does not meet validation rules."""

    default_code = "validation_error"


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    default_code = "not_found"

    def __init__(self, resource: str, identifier: Any = None, **kwargs: Any) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, **kwargs)
        self.resource = resource
        self.identifier = identifier


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"


class DuplicateEventIdError(ConflictError):
    """An event id was reused for a different occurrence.

    Event ids are generated fresh for every occurrence, so this always
    signals a programming error; callers must not retry.
    """

    default_code = "duplicate_event_id"

    def __init__(self, event_id: str, **kwargs: Any) -> None:
        super().__init__(
            f"Event id '{event_id}' is already used by another event",
            detail={"event_id": event_id},
            **kwargs,
        )
        self.event_id = event_id


class UnknownTopicError(DomainError):
    """The topic is not part of this deployment's topic catalogue."""

    default_code = "unknown_topic"

    def __init__(self, topic: str, **kwargs: Any) -> None:
        super().__init__(f"Unknown topic '{topic}'", detail={"topic": topic}, **kwargs)
        self.topic = topic


__all__ = [
    "ConflictError",
    "DomainError",
    "DuplicateEventIdError",
    "NotFoundError",
    "UnknownTopicError",
    "ValidationError",
]
