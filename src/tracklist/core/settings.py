"""
Centralized settings for tracklist.

All fields can be set via ``TRACKLIST_*`` environment variables (e.g.
``TRACKLIST_REDIS_URL=redis://:secret@cache:6379/2``) or a ``.env`` file.
The Redis URL is parsed at load time so a malformed database index fails
startup instead of silently selecting database 0.

Tags:
    tracklist, configuration, settings, pydantic, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tracklist.core.errors import ConfigError


class TracklistSettings(BaseSettings):
    """tracklist configuration.

    Order of precedence (highest → lowest):
        1. Environment variables (``TRACKLIST_REDIS_URL``, etc.)
        2. ``.env`` file
        3. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACKLIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Redis ────────────────────────────────────────────────────
    redis_url: str = Field(default="redis://localhost:6379/0")
    namespace: str = Field(default="tracklist", description="Key prefix for buckets and composites")
    pool_max_idle: int = Field(default=128, ge=0)
    pool_idle_timeout: float = Field(default=60.0, gt=0, description="Seconds an idle connection is kept")
    socket_timeout: float = Field(default=5.0, gt=0, description="Per-command deadline in seconds")
    connect_timeout: float = Field(default=5.0, gt=0)

    # ── API ──────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    debug: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="auto", description="json | console | auto")

    @field_validator("redis_url")
    @classmethod
    def _validate_redis_url(cls, value: str) -> str:
        from tracklist.bitmap.pool import parse_redis_url

        try:
            parse_redis_url(value)
        except ConfigError as exc:
            raise ValueError(exc.message) from exc
        return value

    @field_validator("namespace")
    @classmethod
    def _validate_namespace(cls, value: str) -> str:
        if not value or any(ch.isspace() or ch in ":*?[]" for ch in value):
            raise ValueError(f"invalid namespace: {value!r}")
        return value

    @property
    def json_logs(self) -> bool | None:
        """Map ``log_format`` onto ``configure_logging(json_format=...)``."""
        if self.log_format == "json":
            return True
        if self.log_format == "console":
            return False
        return None


_settings_cache: dict[str, TracklistSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TracklistSettings:
    """Load, validate, and cache a :class:`TracklistSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = TracklistSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
