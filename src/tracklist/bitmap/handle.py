"""
Bitset handles — a named reference to one Redis bitmap.

A ``BitsetHandle`` is just a key bound to a pool. It is the same type for a
raw time bucket and for the result of a boolean composition, which is what
lets compositions nest without special cases. Handles are cheap: creating
one touches nothing; every method is one round trip on a pooled
connection.

Operations::

    track(id)   SETBIT key id 1
    test(id)    GETBIT key id
    count()     BITCOUNT key
    exists()    EXISTS key
    delete()    DEL key

Examples:
    >>> bucket = tracker.month("active", 2024, 1)
    >>> bucket.track(123)
    >>> bucket.test(123), bucket.count(), bucket.exists()
    (True, 1, True)
    >>> (bucket & tracker.month("active", 2024, 2)).count()
    0

Tags:
    tracklist, bitmap, redis, setbit, bitcount, handle

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import redis

from tracklist.bitmap.buckets import DEFAULT_NAMESPACE
from tracklist.core.errors import InvalidArgumentError, StoreCommandError, wrap_store_error

if TYPE_CHECKING:
    from tracklist.bitmap.pool import ConnectionPool

# Redis bit offsets are limited to 2**32 - 1 (512 MB strings)
MAX_ENTITY_ID = 2**32 - 1


def validate_entity_id(entity_id: Any) -> int:
    """Return *entity_id* if it is a usable bit offset."""
    if isinstance(entity_id, bool) or not isinstance(entity_id, int):
        raise InvalidArgumentError(f"Entity id must be an integer, got {entity_id!r}")
    if not 0 <= entity_id <= MAX_ENTITY_ID:
        raise InvalidArgumentError(
            f"Entity id must be in [0, {MAX_ENTITY_ID}], got {entity_id}"
        ).with_context(entity_id=entity_id)
    return entity_id


class BitsetHandle:
    """A possibly non-existent bitmap stored under ``key``."""

    __slots__ = ("_key", "_pool", "_namespace")

    def __init__(self, key: str, pool: ConnectionPool, *, namespace: str = DEFAULT_NAMESPACE):
        self._key = key
        self._pool = pool
        self._namespace = namespace

    @property
    def key(self) -> str:
        return self._key

    @property
    def pool(self) -> ConnectionPool:
        return self._pool

    @property
    def namespace(self) -> str:
        return self._namespace

    @contextmanager
    def _store_errors(self, command: str, entity_id: int | None = None) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as exc:
            raise wrap_store_error(
                StoreCommandError,
                f"{command} {self._key} failed",
                exc,
                key=self._key,
                command=command,
                entity_id=entity_id,
            ) from exc

    def track(self, entity_id: int) -> None:
        """Set the bit for *entity_id*. Idempotent."""
        validate_entity_id(entity_id)
        with self._store_errors("SETBIT", entity_id):
            self._pool.client.setbit(self._key, entity_id, 1)

    def test(self, entity_id: int) -> bool:
        """True iff the bit for *entity_id* is set."""
        validate_entity_id(entity_id)
        with self._store_errors("GETBIT", entity_id):
            return bool(self._pool.client.getbit(self._key, entity_id))

    def count(self) -> int:
        """Number of set bits; 0 for a key that was never written."""
        with self._store_errors("BITCOUNT"):
            return int(self._pool.client.bitcount(self._key))

    def exists(self) -> bool:
        """Whether the key is present in the store at all."""
        with self._store_errors("EXISTS"):
            return bool(self._pool.client.exists(self._key))

    def delete(self) -> None:
        """Remove the key. Deleting a missing key is not an error."""
        with self._store_errors("DEL"):
            self._pool.client.delete(self._key)

    # Set algebra ----------------------------------------------------

    def __and__(self, other: BitsetHandle) -> BitsetHandle:
        from tracklist.bitmap.compose import and_

        return and_(self, other)

    def __or__(self, other: BitsetHandle) -> BitsetHandle:
        from tracklist.bitmap.compose import or_

        return or_(self, other)

    def __xor__(self, other: BitsetHandle) -> BitsetHandle:
        from tracklist.bitmap.compose import xor

        return xor(self, other)

    def __invert__(self) -> BitsetHandle:
        from tracklist.bitmap.compose import not_

        return not_(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitsetHandle):
            return NotImplemented
        return self._key == other._key and self._pool is other._pool

    def __hash__(self) -> int:
        return hash((self._key, id(self._pool)))

    def __repr__(self) -> str:
        return f"BitsetHandle({self._key!r})"


__all__ = ["MAX_ENTITY_ID", "validate_entity_id", "BitsetHandle"]
