"""Application layer – unit of work, event bus, crawler."""
