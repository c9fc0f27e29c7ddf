"""Command-line interface (``tracklist``)."""

from tracklist.cli.app import app

__all__ = ["app"]
