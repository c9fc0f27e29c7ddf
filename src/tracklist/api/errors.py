"""
Error mapping — tracklist errors to JSON responses.

Every error body is ``{"error": "<message>"}``; validation failures are 400
and everything else is 500.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from tracklist.core.errors import ErrorCategory, TracklistError
from tracklist.core.logging import get_logger

log = get_logger(__name__)

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NETWORK: 500,
    ErrorCategory.STORE: 500,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.INTERNAL: 500,
}


def status_for_error(error: TracklistError) -> int:
    """Resolve an error category to HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(error.category, 500)


def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


async def tracklist_error_handler(request: Request, exc: TracklistError) -> JSONResponse:
    status = status_for_error(exc)
    if status >= 500:
        log.error("request_failed", path=request.url.path, **exc.to_dict())
    return error_response(status, exc.message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — returns 500."""
    log.exception("unhandled_exception", path=request.url.path)
    debug = request.app.state.settings.debug
    return error_response(500, str(exc) if debug else "An unexpected error occurred.")
