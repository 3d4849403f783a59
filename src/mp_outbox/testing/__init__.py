"""Testing – fakes and spies for code built on the outbox."""
from mp_outbox.testing.fakes import FakeClock, SequentialUuidGenerator, ids_of, utc
from mp_outbox.testing.spies import failing_subscriber, spy_on_topic

__all__ = [
    "FakeClock",
    "SequentialUuidGenerator",
    "failing_subscriber",
    "ids_of",
    "spy_on_topic",
    "utc",
]
