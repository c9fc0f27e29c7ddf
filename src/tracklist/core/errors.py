"""
Structured error types for tracklist.

Every failure that leaves the bitmap layer is a ``TracklistError`` carrying
a category, an explicit retry hint, structured context (key, command,
metric, entity id) and the chained redis-py exception that caused it.
Nothing inside the library retries; callers read ``retryable`` and decide.

Manifesto:
    - **Typed hierarchy:** One class per failure mode the caller can act on
    - **Explicit retry semantics:** Transport failures are retryable,
      protocol rejections and bad input are not
    - **Rich context:** The store key and command travel with the error
    - **Error chaining:** The redis-py exception is preserved as ``cause``

Architecture:
    ::

        TracklistError  (category, retryable, context, cause)
        ├── StoreConnectionError   dial / AUTH / SELECT failed (NETWORK)
        ├── StoreCommandError      single command failed (STORE)
        ├── TransactionError       MULTI/EXEC batch failed (STORE)
        ├── InvalidArgumentError   bad id, name, operands (VALIDATION)
        └── ConfigError            bad connection string / settings (CONFIG)

Examples:
    >>> error = StoreCommandError("BITCOUNT failed").with_context(
    ...     key="tracklist:active:2024-1", command="BITCOUNT"
    ... )
    >>> error.context.key
    'tracklist:active:2024-1'
    >>> error.retryable
    False

Tags:
    error-handling, exception-hierarchy, retry-logic, error-context,
    redis, tracklist

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import redis


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"        # Dial, socket timeout, AUTH, SELECT
    STORE = "STORE"            # Command or transaction rejected by Redis
    VALIDATION = "VALIDATION"  # Caller supplied invalid input
    CONFIG = "CONFIG"          # Connection string, settings
    INTERNAL = "INTERNAL"      # Bugs, unexpected state
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``, so an error raised
    while counting a bucket logs its key and command and nothing else.

    Attributes:
        key: Redis key the operation targeted
        command: Redis command name (``SETBIT``, ``BITOP``, ...)
        metric: Metric name being tracked or queried
        entity_id: Entity id (bit offset) involved
        url: Redacted connection URL, for connection failures
        metadata: Additional key-value pairs
    """

    key: str | None = None
    command: str | None = None
    metric: str | None = None
    entity_id: int | None = None
    url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["key", "command", "metric", "entity_id", "url"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TracklistError(Exception):
    """
    Base exception for all tracklist errors.

    Subclasses set ``default_category`` and ``default_retryable``; both can
    be overridden per instance when the cause tells us more (a socket
    timeout during ``BITCOUNT`` is retryable, a ``WRONGTYPE`` reply is not).
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TracklistError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreCommandError("GETBIT failed").with_context(
                key=handle.key, command="GETBIT", entity_id=42
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreConnectionError(TracklistError):
    """Dialing, authenticating or selecting the database failed.

    Fatal to that acquisition attempt; the connection is never pooled.
    """

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class StoreCommandError(TracklistError):
    """A single non-transactional command failed."""

    default_category = ErrorCategory.STORE
    default_retryable = False


class TransactionError(TracklistError):
    """A MULTI/EXEC batch failed to queue, execute or commit.

    Redis applies the batch all-or-nothing, so the outcome is either every
    queued write or none of them; this error does not say which side of
    the wire the failure happened on.
    """

    default_category = ErrorCategory.STORE
    default_retryable = False


# =============================================================================
# INPUT ERRORS
# =============================================================================


class InvalidArgumentError(TracklistError):
    """Caller supplied an argument the store cannot represent."""

    default_category = ErrorCategory.VALIDATION
    default_retryable = False


class ConfigError(TracklistError):
    """Connection string or settings value is invalid."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_transport_failure(error: BaseException) -> bool:
    """True when a redis-py exception means the connection itself failed."""
    return isinstance(error, (redis.ConnectionError, redis.TimeoutError, OSError))


def wrap_store_error(
    error_cls: type[TracklistError],
    message: str,
    cause: Exception,
    **context: Any,
) -> TracklistError:
    """Build ``error_cls`` from a redis-py exception, deriving ``retryable``."""
    error = error_cls(
        f"{message}: {cause}",
        retryable=is_transport_failure(cause),
        cause=cause,
    )
    return error.with_context(**context)


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TracklistError",
    "StoreConnectionError",
    "StoreCommandError",
    "TransactionError",
    "InvalidArgumentError",
    "ConfigError",
    "is_transport_failure",
    "wrap_store_error",
]
