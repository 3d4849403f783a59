"""
mp_outbox – transactional outbox and at-least-once event delivery.

Import path convention::

    from mp_outbox.kernel.events import DomainEvent, EventFactory
    from mp_outbox.application.events import EventBus, EventCrawler, SubscriptionRegistry
    from mp_outbox.adapters.in_memory import InMemoryUowPerformer, create_in_memory_uow
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
