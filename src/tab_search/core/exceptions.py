"""
Unified Exception Hierarchy for Tab Search.

Exception Hierarchy:
    TabSearchError (base)
    ├── SourceError
    │   ├── RateLimitError
    │   ├── NetworkError
    │   └── AccessDeniedError
    ├── DataError
    │   ├── NotFoundError
    │   └── ParseError
    └── ConfigurationError

Source failures never cross the aggregation boundary as exceptions: the
engine turns them into ``"<source>: <message>"`` strings on the result.
These classes are raised inside adapters and by wiring code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, can continue
    ERROR = auto()        # Failed but can retry
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""
    SOURCE = "source"
    DATA = "data"
    CONFIGURATION = "config"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context for error messages."""
    operation: str | None = None
    source: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class TabSearchError(Exception):
    """
    Base exception for all Tab Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    __slots__ = ('context', 'severity', 'category', 'retryable')

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.SOURCE,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.source:
            result["source"] = self.context.source
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# Source Errors
# =============================================================================

class SourceError(TabSearchError):
    """Base class for failures reported by a content source."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.SOURCE,
            retryable=retryable,
        )


class RateLimitError(SourceError):
    """Raised when a source throttles our requests."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float = 60.0,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = ErrorContext(
            operation=ctx.operation,
            source=ctx.source,
            input_value=ctx.input_value,
            suggestion=ctx.suggestion or "Wait and retry the request",
            retry_after=retry_after,
            metadata=ctx.metadata,
        )
        # Not retried in-process: the health registry parks the source instead.
        super().__init__(message, context=ctx, retryable=False)
        self.severity = ErrorSeverity.TRANSIENT

    @property
    def retry_after(self) -> float:
        return self.context.retry_after or 60.0


class NetworkError(SourceError):
    """Raised for connectivity issues while talking to a source."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=True)
        self.category = ErrorCategory.NETWORK
        self.severity = ErrorSeverity.TRANSIENT


class AccessDeniedError(SourceError):
    """Raised when a source refuses our requests (401/403)."""

    def __init__(
        self,
        message: str = "Access denied - site may be blocking requests",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, retryable=False)


# =============================================================================
# Data Errors
# =============================================================================

class DataError(TabSearchError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class NotFoundError(DataError):
    """Raised when requested content is not found."""

    def __init__(
        self,
        resource: str,
        identifier: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        msg = f"{resource} not found"
        if identifier:
            msg = f"{resource} not found: {identifier}"

        ctx = context or ErrorContext()
        ctx = ErrorContext(
            operation=ctx.operation,
            source=ctx.source,
            input_value=identifier,
            suggestion=ctx.suggestion or "Check the identifier and try again",
            retry_after=ctx.retry_after,
            metadata=ctx.metadata,
        )
        super().__init__(msg, context=ctx)


class ParseError(DataError):
    """Raised when a source page cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Parse error: {message}"
        if source:
            full_msg = f"Parse error ({source}): {message}"
        super().__init__(full_msg, context=context)


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(TabSearchError):
    """Raised for wiring mistakes such as duplicate source names."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )


def is_retryable_error(error: BaseException) -> bool:
    """Check if an error should be retried."""
    if isinstance(error, TabSearchError):
        return error.retryable

    if isinstance(error, (ConnectionError, TimeoutError)):
        return True

    error_str = str(error).lower()
    transient_patterns = [
        "temporarily unavailable",
        "service unavailable",
        "connection reset",
        "timed out",
    ]
    return any(pattern in error_str for pattern in transient_patterns)


def is_rate_limit_error(error: BaseException) -> bool:
    """Check if an error signals throttling by the remote site."""
    if isinstance(error, RateLimitError):
        return True
    if getattr(error, "status", None) == 429:
        return True
    return "rate limit" in str(error).lower()
