"""Cross-cutting primitives: errors, logging, settings, timestamps."""

from tracklist.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidArgumentError,
    StoreCommandError,
    StoreConnectionError,
    TracklistError,
    TransactionError,
)

__all__ = [
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidArgumentError",
    "StoreCommandError",
    "StoreConnectionError",
    "TracklistError",
    "TransactionError",
]
