"""Health router — ``PING`` Redis through the pool."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from tracklist.api.deps import SettingsDep, TrackerDep
from tracklist.core.errors import TracklistError

router = APIRouter()


@router.get("/health")
def health(tracker: TrackerDep, settings: SettingsDep) -> JSONResponse:
    """200 when Redis answers ``PING``, 503 otherwise."""
    try:
        tracker.pool.ping()
    except TracklistError as exc:
        return JSONResponse(status_code=503, content={"status": "unavailable", "error": exc.message})
    return JSONResponse(status_code=200, content={"status": "ok", "namespace": settings.namespace})
