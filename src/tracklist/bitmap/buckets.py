"""
Bucket key derivation — timestamp → four Redis keys.

A tracked event lands in four bitmaps at once: its month, ISO week, day and
hour. This module turns a metric name and a UTC instant into those four key
strings, and also builds any single key from explicit calendar integers for
backfills and historical queries. It is pure: no I/O, no clock.

Key formats (namespace ``tracklist``)::

    month  tracklist:<name>:<year>-<month>
    week   tracklist:<name>:W<iso_year>-<iso_week>
    day    tracklist:<name>:<year>-<month>-<day>
    hour   tracklist:<name>:<year>-<month>-<day>-<hour>

The coordinate after the last ``:`` never contains a ``:`` itself and the
four shapes differ (``W`` prefix, number of dashes), so a metric name may
contain ``:`` without two different buckets sharing a key.

Examples:
    >>> from datetime import datetime, UTC
    >>> deriver = BucketKeyDeriver()
    >>> deriver.derive("active", datetime(2024, 12, 30, 7, tzinfo=UTC))
    BucketKeys(month='tracklist:active:2024-12', week='tracklist:active:W2025-1', day='tracklist:active:2024-12-30', hour='tracklist:active:2024-12-30-7')

Tags:
    tracklist, bitmap, buckets, iso-week, key-derivation, pure

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NamedTuple

from tracklist.core.errors import InvalidArgumentError
from tracklist.core.timestamps import to_utc

DEFAULT_NAMESPACE = "tracklist"


class Granularity(str, Enum):
    """Calendar granularity of a bucket."""

    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    HOUR = "hour"


def parse_granularity(value: Granularity | str) -> Granularity:
    """Coerce *value* to a :class:`Granularity`."""
    try:
        return Granularity(value)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid unit: {value!r}", cause=exc) from exc


@dataclass(frozen=True)
class CalendarCoordinates:
    """Calendar fields of one UTC instant."""

    year: int
    month: int
    day: int
    hour: int
    iso_year: int
    iso_week: int

    @classmethod
    def from_datetime(cls, timestamp: datetime) -> CalendarCoordinates:
        t = to_utc(timestamp)
        iso_year, iso_week, _ = t.isocalendar()
        return cls(
            year=t.year,
            month=t.month,
            day=t.day,
            hour=t.hour,
            iso_year=iso_year,
            iso_week=iso_week,
        )


class BucketKeys(NamedTuple):
    month: str
    week: str
    day: str
    hour: str


def validate_name(name: str) -> str:
    """Reject metric names that cannot form a key."""
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Metric name must be a non-empty string, got {name!r}")
    if any(ch.isspace() or not ch.isprintable() for ch in name):
        raise InvalidArgumentError(f"Metric name must not contain whitespace: {name!r}")
    return name


def _check_range(field: str, value: int, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidArgumentError(f"{field} must be an integer in [{low}, {high}], got {value!r}")


class BucketKeyDeriver:
    """Builds bucket keys under one namespace."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace

    @property
    def pattern(self) -> str:
        """``KEYS`` pattern matching every bucket in the namespace."""
        return f"{self.namespace}:*"

    def month_key(self, name: str, year: int, month: int) -> str:
        validate_name(name)
        _check_range("month", month, 1, 12)
        return f"{self.namespace}:{name}:{year}-{month}"

    def week_key(self, name: str, iso_year: int, iso_week: int) -> str:
        validate_name(name)
        _check_range("iso_week", iso_week, 1, 53)
        return f"{self.namespace}:{name}:W{iso_year}-{iso_week}"

    def day_key(self, name: str, year: int, month: int, day: int) -> str:
        validate_name(name)
        _check_range("month", month, 1, 12)
        _check_range("day", day, 1, 31)
        return f"{self.namespace}:{name}:{year}-{month}-{day}"

    def hour_key(self, name: str, year: int, month: int, day: int, hour: int) -> str:
        validate_name(name)
        _check_range("month", month, 1, 12)
        _check_range("day", day, 1, 31)
        _check_range("hour", hour, 0, 23)
        return f"{self.namespace}:{name}:{year}-{month}-{day}-{hour}"

    def key_for(self, granularity: Granularity | str, name: str, coords: CalendarCoordinates) -> str:
        """Key of the *granularity* bucket containing *coords*."""
        granularity = parse_granularity(granularity)
        if granularity is Granularity.MONTH:
            return self.month_key(name, coords.year, coords.month)
        if granularity is Granularity.WEEK:
            return self.week_key(name, coords.iso_year, coords.iso_week)
        if granularity is Granularity.DAY:
            return self.day_key(name, coords.year, coords.month, coords.day)
        return self.hour_key(name, coords.year, coords.month, coords.day, coords.hour)

    def derive(self, name: str, timestamp: datetime) -> BucketKeys:
        """All four bucket keys for *name* at *timestamp*."""
        coords = CalendarCoordinates.from_datetime(timestamp)
        return BucketKeys(
            month=self.month_key(name, coords.year, coords.month),
            week=self.week_key(name, coords.iso_year, coords.iso_week),
            day=self.day_key(name, coords.year, coords.month, coords.day),
            hour=self.hour_key(name, coords.year, coords.month, coords.day, coords.hour),
        )


__all__ = [
    "DEFAULT_NAMESPACE",
    "Granularity",
    "parse_granularity",
    "CalendarCoordinates",
    "BucketKeys",
    "BucketKeyDeriver",
    "validate_name",
]
