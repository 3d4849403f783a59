"""Kernel types – identifier generators."""
from mp_outbox.kernel.types.ids import RandomUuidGenerator, UuidGenerator

__all__ = ["RandomUuidGenerator", "UuidGenerator"]
