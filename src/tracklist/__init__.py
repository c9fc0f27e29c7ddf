"""
tracklist - time-bucketed presence tracking on Redis bitmaps.

Record that an entity id was active for a metric at an instant, bucketed
by month, ISO week, day and hour, then answer cohort and retention
questions with bit counts and AND/OR/XOR/NOT compositions.

    >>> from tracklist import ConnectionPool, Tracker, and_
    >>> tracker = Tracker(ConnectionPool("redis://localhost:6379/0"))
    >>> tracker.record_now("active", 123)
"""

__version__ = "0.1.0"

from tracklist.bitmap import (  # noqa: E402
    BitOperator,
    BitsetHandle,
    ConnectionPool,
    Granularity,
    Tracker,
    and_,
    compose,
    not_,
    or_,
    xor,
)
from tracklist.core.errors import (  # noqa: E402
    ConfigError,
    InvalidArgumentError,
    StoreCommandError,
    StoreConnectionError,
    TracklistError,
    TransactionError,
)

__all__ = [
    "__version__",
    "BitOperator",
    "BitsetHandle",
    "ConnectionPool",
    "Granularity",
    "Tracker",
    "and_",
    "compose",
    "not_",
    "or_",
    "xor",
    "ConfigError",
    "InvalidArgumentError",
    "StoreCommandError",
    "StoreConnectionError",
    "TracklistError",
    "TransactionError",
]
