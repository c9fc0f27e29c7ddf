"""Tests for tracklist.core.timestamps."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from tracklist.core.errors import InvalidArgumentError
from tracklist.core.timestamps import parse_date, parse_timestamp, to_utc, utc_now


class TestUtcNow:
    def test_is_aware_utc(self):
        now = utc_now()
        assert now.tzinfo is UTC


class TestToUtc:
    def test_naive_is_assumed_utc(self):
        assert to_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_aware_is_converted(self):
        eastern = timezone(timedelta(hours=-5))
        assert to_utc(datetime(2024, 1, 1, 22, tzinfo=eastern)) == datetime(2024, 1, 2, 3, tzinfo=UTC)


class TestParseDate:
    def test_valid(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    @pytest.mark.parametrize("value", ["", "2024-02-30", "2024/02/01", "yesterday"])
    def test_invalid(self, value):
        with pytest.raises(InvalidArgumentError, match="Invalid from_date"):
            parse_date(value, field="from_date")


class TestParseTimestamp:
    def test_offset_converted(self):
        assert parse_timestamp("2024-03-15T12:30:00+02:00") == datetime(2024, 3, 15, 10, 30, tzinfo=UTC)

    def test_naive(self):
        assert parse_timestamp("2024-03-15T10:30:00") == datetime(2024, 3, 15, 10, 30, tzinfo=UTC)

    def test_invalid(self):
        with pytest.raises(InvalidArgumentError, match="Invalid timestamp"):
            parse_timestamp("not a time")
