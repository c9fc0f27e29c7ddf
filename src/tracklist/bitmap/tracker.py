"""
Tracker — record entity presence in month, week, day and hour buckets.

``record_at_time`` derives the four bucket keys for a timestamp and sets the
entity's bit in all of them in a single MULTI/EXEC on one pooled
connection, so observers see either all four buckets updated or none.
The tracker is also the factory for bucket handles used by queries and
owns bulk deletion of the namespace.

Manifesto:
    - **Atomic fan-out:** one transaction per event, never 2-of-4 updated
    - **Explicit dependencies:** pool, namespace and clock are injected
    - **Stateless:** all durable state lives in Redis

Architecture:
    ::

        record_at_time(name, id, t)
            │
            ├── BucketKeyDeriver.derive(name, t) → month/week/day/hour keys
            ├── pool.client.pipeline(transaction=True)
            │       MULTI
            │       SETBIT <month> id 1
            │       SETBIT <week>  id 1
            │       SETBIT <day>   id 1
            │       SETBIT <hour>  id 1
            │       EXEC
            └── execute()

Examples:
    >>> tracker = Tracker(ConnectionPool("redis://localhost:6379/15"))
    >>> tracker.record_now("active", 123)
    >>> tracker.month_at("active", utc_now()).test(123)
    True
    >>> tracker.delete_all_buckets()
    4

Tags:
    tracklist, bitmap, tracker, multi-exec, buckets, cohort

Doc-Types:
    - API Reference
    - Technical Design
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import NamedTuple

import redis

from tracklist.bitmap.buckets import (
    DEFAULT_NAMESPACE,
    BucketKeyDeriver,
    CalendarCoordinates,
    Granularity,
)
from tracklist.bitmap.handle import BitsetHandle, validate_entity_id
from tracklist.bitmap.pool import ConnectionPool
from tracklist.core.errors import StoreCommandError, TransactionError, wrap_store_error
from tracklist.core.logging import get_logger
from tracklist.core.timestamps import utc_now

log = get_logger(__name__)

DELETE_CHUNK_SIZE = 512


class BucketHandles(NamedTuple):
    month: BitsetHandle
    week: BitsetHandle
    day: BitsetHandle
    hour: BitsetHandle


class Tracker:
    """Records events into time buckets and hands out bucket handles."""

    def __init__(
        self,
        pool: ConnectionPool,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.pool = pool
        self.namespace = namespace
        self.keys = BucketKeyDeriver(namespace)
        self._clock = clock

    def _handle(self, key: str) -> BitsetHandle:
        return BitsetHandle(key, self.pool, namespace=self.namespace)

    # Recording ------------------------------------------------------

    def record_at_time(self, name: str, entity_id: int, timestamp: datetime) -> None:
        """Mark *entity_id* present in all four buckets of *timestamp*.

        Raises:
            InvalidArgumentError: Bad metric name or entity id.
            StoreConnectionError: No connection could be established.
            TransactionError: The MULTI/EXEC batch failed.
        """
        validate_entity_id(entity_id)
        keys = self.keys.derive(name, timestamp)
        try:
            with self.pool.client.pipeline(transaction=True) as pipe:
                for key in keys:
                    pipe.setbit(key, entity_id, 1)
                pipe.execute()
        except redis.RedisError as exc:
            log.warning("record_failed", metric=name, entity_id=entity_id, error=str(exc))
            raise wrap_store_error(
                TransactionError,
                f"Recording {name!r} for {entity_id} failed",
                exc,
                metric=name,
                entity_id=entity_id,
                command="EXEC",
            ) from exc

        log.debug("recorded", metric=name, entity_id=entity_id, hour_key=keys.hour)

    def record_now(self, name: str, entity_id: int) -> None:
        """``record_at_time`` with the tracker's clock (UTC now)."""
        self.record_at_time(name, entity_id, self._clock())

    # Bucket handles -------------------------------------------------

    def month(self, name: str, year: int, month: int) -> BitsetHandle:
        return self._handle(self.keys.month_key(name, year, month))

    def week(self, name: str, iso_year: int, iso_week: int) -> BitsetHandle:
        return self._handle(self.keys.week_key(name, iso_year, iso_week))

    def day(self, name: str, year: int, month: int, day: int) -> BitsetHandle:
        return self._handle(self.keys.day_key(name, year, month, day))

    def hour(self, name: str, year: int, month: int, day: int, hour: int) -> BitsetHandle:
        return self._handle(self.keys.hour_key(name, year, month, day, hour))

    def bucket(self, granularity: Granularity | str, name: str, timestamp: datetime) -> BitsetHandle:
        """Handle on the *granularity* bucket containing *timestamp*."""
        coords = CalendarCoordinates.from_datetime(timestamp)
        return self._handle(self.keys.key_for(granularity, name, coords))

    def month_at(self, name: str, timestamp: datetime) -> BitsetHandle:
        return self.bucket(Granularity.MONTH, name, timestamp)

    def week_at(self, name: str, timestamp: datetime) -> BitsetHandle:
        return self.bucket(Granularity.WEEK, name, timestamp)

    def day_at(self, name: str, timestamp: datetime) -> BitsetHandle:
        return self.bucket(Granularity.DAY, name, timestamp)

    def hour_at(self, name: str, timestamp: datetime) -> BitsetHandle:
        return self.bucket(Granularity.HOUR, name, timestamp)

    def buckets_at(self, name: str, timestamp: datetime) -> BucketHandles:
        """All four bucket handles that ``record_at_time`` would write."""
        keys = self.keys.derive(name, timestamp)
        return BucketHandles(*(self._handle(key) for key in keys))

    # Bulk deletion --------------------------------------------------

    def _delete_matching(self, pattern: str) -> int:
        try:
            keys = self.pool.client.keys(pattern)
            deleted = 0
            # Chunks are deleted independently; a failure keeps earlier ones deleted
            for start in range(0, len(keys), DELETE_CHUNK_SIZE):
                deleted += self.pool.client.delete(*keys[start:start + DELETE_CHUNK_SIZE])
        except redis.RedisError as exc:
            raise wrap_store_error(
                StoreCommandError,
                f"Deleting keys matching {pattern!r} failed",
                exc,
                key=pattern,
                command="DEL",
            ) from exc

        log.info("keys_deleted", pattern=pattern, count=deleted)
        return deleted

    def delete_all_buckets(self) -> int:
        """Delete every bucket in the namespace; returns keys removed."""
        return self._delete_matching(self.keys.pattern)

    def delete_all_composites(self) -> int:
        """Delete every composite written by ``compose`` in the namespace."""
        return self._delete_matching(f"{self.namespace}_bitop_*")

    def __repr__(self) -> str:
        return f"Tracker(namespace={self.namespace!r}, pool={self.pool!r})"


__all__ = ["BucketHandles", "Tracker"]
