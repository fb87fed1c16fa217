"""
Core module for Tab Search.

Provides:
- Unified exception hierarchy
- Async utilities for concurrent source calls
"""

from .exceptions import (
    # Base
    TabSearchError,
    ErrorContext,
    ErrorSeverity,
    ErrorCategory,
    # Source errors
    SourceError,
    RateLimitError,
    NetworkError,
    AccessDeniedError,
    # Data errors
    DataError,
    NotFoundError,
    ParseError,
    # Configuration errors
    ConfigurationError,
    # Utilities
    is_retryable_error,
    is_rate_limit_error,
)

from .async_utils import (
    RateLimiter,
    gather_settled,
    PeriodicTask,
)

__all__ = [
    # Exceptions
    "TabSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "SourceError",
    "RateLimitError",
    "NetworkError",
    "AccessDeniedError",
    "DataError",
    "NotFoundError",
    "ParseError",
    "ConfigurationError",
    "is_retryable_error",
    "is_rate_limit_error",
    # Async utilities
    "RateLimiter",
    "gather_settled",
    "PeriodicTask",
]
