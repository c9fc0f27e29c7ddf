"""
FastAPI dependency injection — the tracker and settings stored on app state.

Usage in routers::

    from tracklist.api.deps import TrackerDep

    @router.post("/track")
    def track(tracker: TrackerDep):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from tracklist.bitmap.tracker import Tracker
from tracklist.core.settings import TracklistSettings


def get_tracker(request: Request) -> Tracker:
    """The process-wide tracker built by ``create_app``."""
    return request.app.state.tracker


def get_app_settings(request: Request) -> TracklistSettings:
    return request.app.state.settings


TrackerDep = Annotated[Tracker, Depends(get_tracker)]
SettingsDep = Annotated[TracklistSettings, Depends(get_app_settings)]
