"""
Root Typer application for the tracklist CLI.

Commands:
    serve    Run the HTTP API under uvicorn
    track    Record an entity id for a metric
    count    Show bucket cardinality for a metric
    purge    Delete every bucket (and optionally composites)
"""

from __future__ import annotations

import typer

from tracklist import __version__
from tracklist.bitmap.buckets import Granularity
from tracklist.cli.utils import console, fail, make_tracker
from tracklist.core.errors import TracklistError
from tracklist.core.logging import configure_logging
from tracklist.core.settings import get_settings
from tracklist.core.timestamps import parse_timestamp, utc_now

app = typer.Typer(
    name="tracklist",
    help="tracklist — time-bucketed presence tracking on Redis bitmaps.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

RedisOption = typer.Option(None, "--redis-url", "-r", help="Override TRACKLIST_REDIS_URL")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"tracklist {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tracklist CLI — record events, query buckets, run the API."""


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Start the tracklist HTTP API."""
    import uvicorn

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    bind_host = host or settings.host
    bind_port = port or settings.port
    console.print(f"[bold green]Starting tracklist API[/bold green] on {bind_host}:{bind_port}")
    uvicorn.run(
        "tracklist.api:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command("track")
def track(
    name: str = typer.Argument(..., help="Metric name"),
    entity_id: int = typer.Argument(..., help="Entity id (bit offset)"),
    at: str | None = typer.Option(None, "--at", help="ISO-8601 timestamp (default: now)"),
    redis_url: str | None = RedisOption,
) -> None:
    """Record ENTITY_ID as present for NAME."""
    tracker = make_tracker(redis_url)
    with tracker.pool:
        try:
            if at:
                tracker.record_at_time(name, entity_id, parse_timestamp(at))
            else:
                tracker.record_now(name, entity_id)
        except TracklistError as exc:
            fail(exc)
    console.print(f"[green]✓[/green] recorded {entity_id} for {name}")


@app.command("count")
def count(
    name: str = typer.Argument(..., help="Metric name"),
    unit: Granularity = typer.Option(Granularity.MONTH, "--unit", "-u", help="Bucket granularity"),
    at: str | None = typer.Option(None, "--at", help="ISO-8601 timestamp (default: now)"),
    redis_url: str | None = RedisOption,
) -> None:
    """Print the number of entities in NAME's bucket."""
    tracker = make_tracker(redis_url)
    with tracker.pool:
        try:
            timestamp = parse_timestamp(at) if at else utc_now()
            bucket = tracker.bucket(unit, name, timestamp)
            total = bucket.count()
        except TracklistError as exc:
            fail(exc)
    console.print(f"{bucket.key}\t{total}")


@app.command("purge")
def purge(
    composites: bool = typer.Option(False, "--composites", help="Also delete BITOP results"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    redis_url: str | None = RedisOption,
) -> None:
    """Delete every bucket in the namespace."""
    tracker = make_tracker(redis_url)
    with tracker.pool:
        if not yes:
            typer.confirm(f"Delete all keys under {tracker.namespace!r}?", abort=True)
        try:
            deleted = tracker.delete_all_buckets()
            if composites:
                deleted += tracker.delete_all_composites()
        except TracklistError as exc:
            fail(exc)
    console.print(f"deleted {deleted} keys")
