"""Identifier generation for events."""

from __future__ import annotations

import uuid
from typing import Protocol


class UuidGenerator(Protocol):
    """Port: produce a fresh, never reused identifier."""

    def new(self) -> str: ...


class RandomUuidGenerator:
    """UUID v4 generator used in production."""

    def new(self) -> str:
        return str(uuid.uuid4())


__all__ = ["RandomUuidGenerator", "UuidGenerator"]
