"""
Composite bitsets — boolean combinations persisted as new bitmaps.

``compose(op, operands)`` runs one ``BITOP`` that writes the combination of
the operand bitmaps to a derived key and returns a handle on that key. The
result is an ordinary ``BitsetHandle``, so it can be counted, tested, or
fed into another ``compose`` call to any depth.

Manifesto:
    - **One command:** ``BITOP`` is atomic for its destination; readers
      never see a half-written composite
    - **Eager:** every call recomputes and overwrites the destination, so a
      returned handle reflects the operands as of that call
    - **Canonical keys:** AND/OR/XOR are commutative, so operand keys are
      sorted before naming the destination; the same operand set in any
      order shares one stored bitmap

Key format::

    <namespace>_bitop_<OP>_<key1>-<key2>-...

Examples:
    >>> jan, feb = tracker.month("active", 2024, 1), tracker.month("active", 2024, 2)
    >>> both = and_(jan, feb)
    >>> both.key
    'tracklist_bitop_AND_tracklist:active:2024-1-tracklist:active:2024-2'
    >>> and_(both, tracker.month("active", 2024, 3)).count()
    0

Tags:
    tracklist, bitmap, bitop, set-algebra, cohort, retention

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

import redis

from tracklist.bitmap.handle import BitsetHandle
from tracklist.core.errors import InvalidArgumentError, StoreCommandError, wrap_store_error
from tracklist.core.logging import get_logger

log = get_logger(__name__)


class BitOperator(str, Enum):
    AND = "AND"
    OR = "OR"
    XOR = "XOR"
    NOT = "NOT"

    @property
    def commutative(self) -> bool:
        return self is not BitOperator.NOT


def composite_key(operator: BitOperator | str, keys: Sequence[str], namespace: str) -> str:
    """Destination key for *operator* applied to *keys*."""
    operator = BitOperator(operator)
    if operator.commutative:
        keys = sorted(keys)
    return f"{namespace}_bitop_{operator.value}_{'-'.join(keys)}"


def _check_operands(operator: BitOperator, operands: Sequence[BitsetHandle]) -> None:
    if not operands:
        raise InvalidArgumentError(f"BITOP {operator.value} needs at least one operand")
    for operand in operands:
        if not isinstance(operand, BitsetHandle):
            raise InvalidArgumentError(f"BITOP operand must be a BitsetHandle, got {operand!r}")
    pool = operands[0].pool
    if any(operand.pool is not pool for operand in operands[1:]):
        raise InvalidArgumentError("BITOP operands must share one connection pool")
    if operator is BitOperator.NOT and len(operands) != 1:
        raise InvalidArgumentError(f"BITOP NOT takes exactly one operand, got {len(operands)}")


def compose(operator: BitOperator | str, operands: Sequence[BitsetHandle]) -> BitsetHandle:
    """Write ``operator(operands)`` to a derived key and return its handle.

    Raises:
        InvalidArgumentError: Empty operand list, mixed pools, or NOT with
            more than one operand.
        StoreCommandError: ``BITOP`` failed.
    """
    try:
        operator = BitOperator(operator)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown bit operator: {operator!r}", cause=exc) from exc

    operands = list(operands)
    _check_operands(operator, operands)

    first = operands[0]
    source_keys = [operand.key for operand in operands]
    dest = composite_key(operator, source_keys, first.namespace)

    try:
        first.pool.client.bitop(operator.value, dest, *source_keys)
    except redis.RedisError as exc:
        raise wrap_store_error(
            StoreCommandError,
            f"BITOP {operator.value} into {dest} failed",
            exc,
            key=dest,
            command="BITOP",
        ) from exc

    log.debug("bitop_composed", operator=operator.value, key=dest, operands=len(source_keys))
    return BitsetHandle(dest, first.pool, namespace=first.namespace)


def and_(*operands: BitsetHandle) -> BitsetHandle:
    return compose(BitOperator.AND, operands)


def or_(*operands: BitsetHandle) -> BitsetHandle:
    return compose(BitOperator.OR, operands)


def xor(*operands: BitsetHandle) -> BitsetHandle:
    return compose(BitOperator.XOR, operands)


def not_(operand: BitsetHandle) -> BitsetHandle:
    """Complement of *operand*, padded to its byte length by Redis."""
    return compose(BitOperator.NOT, [operand])


__all__ = ["BitOperator", "composite_key", "compose", "and_", "or_", "xor", "not_"]
