"""Resilience – guards applied around subscriber callbacks."""
from mp_outbox.resilience.timeouts import TimeoutPolicy

__all__ = ["TimeoutPolicy"]
