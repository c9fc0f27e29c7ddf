"""
FastAPI application factory.

``create_app()`` builds the connection pool and tracker, then wires
middleware, error handlers and routers into a single ``FastAPI`` instance.
The pool is created up front (dialing is lazy) and closed on shutdown when
the app owns it; tests inject their own.

Tags:
    tracklist, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tracklist import __version__
from tracklist.api.errors import tracklist_error_handler, unhandled_exception_handler
from tracklist.api.middleware import RequestIDMiddleware
from tracklist.bitmap.pool import ConnectionPool
from tracklist.bitmap.tracker import Tracker
from tracklist.core.errors import TracklistError
from tracklist.core.logging import get_logger
from tracklist.core.settings import TracklistSettings, get_settings

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup / shutdown hooks."""
    log.info(
        "tracklist API starting",
        version=app.version,
        redis=app.state.tracker.pool.address.redacted,
        namespace=app.state.tracker.namespace,
    )
    yield
    if app.state.owns_pool:
        app.state.tracker.pool.close()
    log.info("tracklist API shutting down")


def create_app(
    settings: TracklistSettings | None = None,
    *,
    pool: ConnectionPool | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : TracklistSettings | None
        Override settings (useful for testing). When ``None`` the cached
        instance from :func:`get_settings` is used.
    pool : ConnectionPool | None
        Pre-built pool; the app will not close a pool it did not create.
    """
    settings = settings or get_settings()

    app = FastAPI(title="tracklist", version=__version__, lifespan=lifespan)

    app.state.settings = settings
    app.state.owns_pool = pool is None
    pool = pool or ConnectionPool.from_settings(settings)
    app.state.tracker = Tracker(pool, namespace=settings.namespace)

    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(TracklistError, tracklist_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    from tracklist.api.routers import health, retention, track

    app.include_router(health.router, tags=["health"])
    app.include_router(track.router, tags=["track"])
    app.include_router(retention.router, tags=["retention"])

    return app
