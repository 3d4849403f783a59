"""Observability – structured logging."""
from mp_outbox.observability.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
