"""Application outbox – store ports for durable events."""
from mp_outbox.application.outbox.ports import (
    STATUSES_TO_PUBLISH,
    OutboxQueries,
    OutboxRepository,
)

__all__ = ["STATUSES_TO_PUBLISH", "OutboxQueries", "OutboxRepository"]
