"""Redis bitmap presence index.

Layers, leaves first::

    buckets.py   Timestamp → month/week/day/hour keys (pure)
    pool.py      Pooled, authenticated redis-py connections
    handle.py    BitsetHandle: track / test / count / exists / delete
    compose.py   BITOP compositions returning new handles
    tracker.py   Atomic four-bucket recording + bulk deletion
"""

from tracklist.bitmap.buckets import (
    DEFAULT_NAMESPACE,
    BucketKeyDeriver,
    BucketKeys,
    CalendarCoordinates,
    Granularity,
    parse_granularity,
)
from tracklist.bitmap.compose import BitOperator, and_, compose, composite_key, not_, or_, xor
from tracklist.bitmap.handle import MAX_ENTITY_ID, BitsetHandle, validate_entity_id
from tracklist.bitmap.pool import ConnectionPool, RedisAddress, parse_redis_url
from tracklist.bitmap.tracker import BucketHandles, Tracker

__all__ = [
    "DEFAULT_NAMESPACE",
    "BucketKeyDeriver",
    "BucketKeys",
    "CalendarCoordinates",
    "Granularity",
    "parse_granularity",
    "BitOperator",
    "and_",
    "compose",
    "composite_key",
    "not_",
    "or_",
    "xor",
    "MAX_ENTITY_ID",
    "BitsetHandle",
    "validate_entity_id",
    "ConnectionPool",
    "RedisAddress",
    "parse_redis_url",
    "BucketHandles",
    "Tracker",
]
