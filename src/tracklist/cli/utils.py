"""
CLI utility helpers — console output and tracker construction.
"""

from __future__ import annotations

import typer
from rich.console import Console

from tracklist.bitmap.pool import ConnectionPool
from tracklist.bitmap.tracker import Tracker
from tracklist.core.errors import TracklistError
from tracklist.core.settings import get_settings

console = Console()
err_console = Console(stderr=True)


def make_tracker(redis_url: str | None = None) -> Tracker:
    """Build a tracker from settings, optionally overriding the Redis URL."""
    settings = get_settings()
    try:
        pool = ConnectionPool(
            redis_url or settings.redis_url,
            max_idle=settings.pool_max_idle,
            idle_timeout=settings.pool_idle_timeout,
            socket_timeout=settings.socket_timeout,
            connect_timeout=settings.connect_timeout,
        )
    except TracklistError as exc:
        fail(exc)
    return Tracker(pool, namespace=settings.namespace)


def fail(exc: TracklistError) -> None:
    """Print *exc* and exit non-zero."""
    err_console.print(f"[red]{exc.__class__.__name__}:[/red] {exc.message}")
    raise typer.Exit(code=1)
