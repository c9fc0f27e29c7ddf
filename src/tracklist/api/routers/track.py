"""
Track router — record one event for a metric.

Endpoints:
    POST /track   form fields ``name`` and ``id``

Responds 201 on success, 400 when ``id`` is not a non-negative integer or
``name`` is empty, and 500 when Redis fails.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Form
from pydantic import BaseModel, Field

from tracklist.api.deps import TrackerDep
from tracklist.core.errors import InvalidArgumentError
from tracklist.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter()


class TrackResponse(BaseModel):
    name: str = Field(description="Metric name")
    id: int = Field(description="Entity id recorded")


def parse_int(value: str, field: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid {field}: {value!r}", cause=exc) from exc


@router.post("/track", status_code=201, response_model=TrackResponse)
def track(
    tracker: TrackerDep,
    name: Annotated[str, Form()] = "",
    entity_id: Annotated[str, Form(alias="id")] = "",
) -> TrackResponse:
    """Record ``id`` as present for ``name`` in the current buckets."""
    parsed = parse_int(entity_id, "id")
    log.debug("track_received", metric=name, entity_id=parsed)
    tracker.record_now(name, parsed)
    return TrackResponse(name=name, id=parsed)
