"""
UTC timestamp utilities (stdlib-only).

Buckets are always computed from UTC instants; these helpers keep naive
and aware datetimes from leaking into key derivation unconverted.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from tracklist.core.errors import InvalidArgumentError

DATE_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """Return *dt* as an aware UTC datetime.

    Naive datetimes are taken to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def parse_date(value: str, *, field: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid {field}: {value!r}", cause=exc) from exc


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into an aware UTC datetime."""
    try:
        return to_utc(datetime.fromisoformat(value))
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"Invalid timestamp: {value!r}", cause=exc) from exc
