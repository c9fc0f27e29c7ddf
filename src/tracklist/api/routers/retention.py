"""
Retention router — cohort retention over time buckets.

Endpoints:
    GET /retention   name, unit, interval, from_date, to_date

The cohort is the ``unit`` bucket containing ``from_date``. Starting at
``from_date`` and stepping ``interval`` units up to ``to_date`` inclusive,
each period reports its bucket size and how many cohort members are in it
(``AND(cohort, period).count()``). The first period is the cohort itself.

Errors are 400 with ``{"error": ...}``.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from fastapi import APIRouter
from pydantic import BaseModel, Field

from tracklist.api.deps import TrackerDep
from tracklist.api.routers.track import parse_int
from tracklist.bitmap.buckets import Granularity, parse_granularity, validate_name
from tracklist.bitmap.compose import and_
from tracklist.core.errors import InvalidArgumentError
from tracklist.core.timestamps import parse_date

router = APIRouter()

MAX_PERIODS = 1000


class RetentionPeriod(BaseModel):
    start: str = Field(description="ISO-8601 start of the period")
    key: str = Field(description="Bucket key for the period")
    count: int = Field(description="Entities present in the period")
    retained: int = Field(description="Cohort members present in the period")


class RetentionReport(BaseModel):
    name: str
    unit: Granularity
    interval: int
    cohort_key: str
    cohort_size: int
    periods: list[RetentionPeriod]


def _add_months(start: datetime, months: int) -> datetime:
    index = start.month - 1 + months
    return start.replace(year=start.year + index // 12, month=index % 12 + 1, day=1)


def _advance(start: datetime, unit: Granularity, steps: int) -> datetime:
    if unit is Granularity.MONTH:
        return _add_months(start, steps)
    if unit is Granularity.WEEK:
        return start + timedelta(weeks=steps)
    if unit is Granularity.DAY:
        return start + timedelta(days=steps)
    return start + timedelta(hours=steps)


def period_starts(unit: Granularity, interval: int, from_date: date, to_date: date) -> list[datetime]:
    """Period start instants from *from_date* to *to_date* inclusive."""
    start = datetime(from_date.year, from_date.month, from_date.day, tzinfo=UTC)

    starts: list[datetime] = []
    step = 0
    current = start
    while current.date() <= to_date:
        if len(starts) == MAX_PERIODS:
            raise InvalidArgumentError(f"Too many periods; at most {MAX_PERIODS} allowed")
        starts.append(current)
        step += interval
        try:
            current = _advance(start, unit, step)
        except (OverflowError, ValueError):
            # Next period starts after year 9999
            break
    return starts


@router.get("/retention", response_model=RetentionReport)
def retention(
    tracker: TrackerDep,
    name: str = "",
    unit: str = "",
    interval: str = "",
    from_date: str = "",
    to_date: str = "",
) -> RetentionReport:
    """Retention of the ``from_date`` cohort across later periods."""
    validate_name(name)
    granularity = parse_granularity(unit)

    step = parse_int(interval, "interval")
    if step < 1:
        raise InvalidArgumentError("Invalid interval")

    start = parse_date(from_date, field="from_date")
    end = parse_date(to_date, field="to_date")
    if end < start:
        raise InvalidArgumentError("to_date is before from_date")

    starts = period_starts(granularity, step, start, end)
    cohort = tracker.bucket(granularity, name, starts[0])

    periods = []
    for period_start in starts:
        bucket = tracker.bucket(granularity, name, period_start)
        periods.append(
            RetentionPeriod(
                start=period_start.isoformat(),
                key=bucket.key,
                count=bucket.count(),
                retained=and_(cohort, bucket).count(),
            )
        )

    return RetentionReport(
        name=name,
        unit=granularity,
        interval=step,
        cohort_key=cohort.key,
        cohort_size=periods[0].count,
        periods=periods,
    )
