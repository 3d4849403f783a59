"""In-memory adapter – outbox store, aggregate store and unit of work."""
from mp_outbox.adapters.in_memory.outbox import InMemoryOutboxQueries, InMemoryOutboxRepository
from mp_outbox.adapters.in_memory.repository import InMemoryRepository, Snapshottable
from mp_outbox.adapters.in_memory.uow import InMemoryUowPerformer, create_in_memory_uow

__all__ = [
    "InMemoryOutboxQueries",
    "InMemoryOutboxRepository",
    "InMemoryRepository",
    "InMemoryUowPerformer",
    "Snapshottable",
    "create_in_memory_uow",
]
