"""
HTTP front end for tracklist.

Quick start::

    from tracklist.api import create_app

    app = create_app()  # ready for uvicorn

The routers only parse requests and shape responses; everything they do
against Redis goes through :class:`~tracklist.bitmap.tracker.Tracker`.
"""

from tracklist.api.app import create_app

__all__ = ["create_app"]
