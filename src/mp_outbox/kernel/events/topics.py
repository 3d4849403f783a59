"""Topic catalogue – the closed set of topics known to one deployment."""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from mp_outbox.kernel.errors import UnknownTopicError, ValidationError


class TopicCatalogue:
    """Explicit ``topic → payload type`` registry, read-only once built.

    A ``None`` payload type accepts any payload.  Dataclass payload types are
    converted to and from plain dicts by :meth:`encode_payload` and
    :meth:`decode_payload` so that durable stores can keep them as JSON.

    Example::

        catalogue = TopicCatalogue({
            "ConventionSubmitted": ConventionSubmittedPayload,
            "AgencyUpdated": None,
        })
    """

    def __init__(self, topics: Mapping[str, type | None]) -> None:
        self._topics: Mapping[str, type | None] = MappingProxyType(dict(topics))

    def __contains__(self, topic: object) -> bool:
        return topic in self._topics

    def __iter__(self) -> Iterator[str]:
        return iter(self._topics)

    def __len__(self) -> int:
        return len(self._topics)

    def payload_type(self, topic: str) -> type | None:
        try:
            return self._topics[topic]
        except KeyError:
            raise UnknownTopicError(topic) from None

    def validate(self, topic: str, payload: Any) -> None:
        expected = self.payload_type(topic)
        if expected is not None and not isinstance(payload, expected):
            raise ValidationError(
                f"Payload for topic '{topic}' must be {expected.__name__}, "
                f"got {type(payload).__name__}",
                detail={"topic": topic},
            )

    def encode_payload(self, topic: str, payload: Any) -> Any:
        self.payload_type(topic)
        return encode_payload(payload)

    def decode_payload(self, topic: str, data: Any) -> Any:
        expected = self._topics.get(topic)
        if expected is not None and dataclasses.is_dataclass(expected) and isinstance(data, Mapping):
            return expected(**data)
        return data


def encode_payload(payload: Any) -> Any:
    """Convert a dataclass payload to a JSON-friendly dict; return others as-is."""
    if dataclasses.is_dataclass(payload) and not isinstance(payload, type):
        return dataclasses.asdict(payload)
    if isinstance(payload, Mapping):
        return dict(payload)
    return payload


__all__ = ["TopicCatalogue", "encode_payload"]
