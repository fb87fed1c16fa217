"""
Base Tab Source - Shared plumbing for content-source adapters.

Every concrete adapter needs the same things around its site-specific
scraping code:
- Request pacing (requests per minute) with a token bucket
- Retry of transient failures with exponential backoff (tenacity)
- An optional per-call timeout taken from the search options
- Translation of failures into a ``SourceResult`` instead of exceptions

Subclasses implement ``_search()`` and ``_get_by_id()`` and raise the
exceptions from ``tab_search.core.exceptions`` when something goes wrong.

Example:
    class MySiteSource(BaseTabSource):
        def __init__(self):
            super().__init__("my-site", "https://tabs.example.com", requests_per_minute=15)

        async def _search(self, query, options):
            ...  # fetch + parse, return list[Tab]

        async def _get_by_id(self, tab_id):
            ...  # return Tab | None
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from tab_search.core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    RateLimitError,
    is_rate_limit_error,
    is_retryable_error,
)
from tab_search.core.async_utils import RateLimiter
from tab_search.domain.entities import SearchOptions, SourceResult, Tab

logger = logging.getLogger(__name__)

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_AFTER = 60  # seconds, when the site does not say

ACCESS_DENIED_MESSAGE = "Access denied - site may be blocking requests"
NOT_FOUND_MESSAGE = "Content not found"
TIMEOUT_MESSAGE = "Request timed out"
UNKNOWN_ERROR_MESSAGE = "Unknown scraping error"


class BaseTabSource(ABC):
    """
    Abstract base for source adapters.

    ``search()`` and ``get_by_id()`` never raise: every failure is reported
    through the returned ``SourceResult``.
    """

    # Backoff between retries of transient failures (seconds)
    _RETRY_WAIT_MIN: float = 1.0
    _RETRY_WAIT_MAX: float = 8.0

    def __init__(
        self,
        site_name: str,
        base_url: str = "",
        requests_per_minute: float = 30,
    ) -> None:
        """
        Initialize base source.

        Args:
            site_name: Name the adapter is registered under; stamped on every Tab
            base_url: Root URL of the site (informational)
            requests_per_minute: Maximum request rate towards the site
        """
        self.site_name = site_name
        self.base_url = base_url.rstrip("/")
        self.requests_per_minute = requests_per_minute
        self._rate_limiter = RateLimiter(rate=requests_per_minute, per=60.0)

    # =========================================================================
    # Public contract
    # =========================================================================

    async def search(self, query: str, options: SearchOptions | None = None) -> SourceResult:
        options = options or SearchOptions()
        try:
            tabs = await self._call(lambda: self._search(query, options), options)
        except Exception as e:
            return self.error_to_result(e, "search")
        return SourceResult.ok(tabs)

    async def get_by_id(self, tab_id: str) -> SourceResult:
        try:
            tab = await self._call(lambda: self._get_by_id(tab_id), SearchOptions())
        except Exception as e:
            return self.error_to_result(e, "get_by_id")
        return SourceResult.ok([tab] if tab is not None else [])

    # =========================================================================
    # Subclass hooks
    # =========================================================================

    @abstractmethod
    async def _search(self, query: str, options: SearchOptions) -> list[Tab]:
        """Fetch and parse search results from the site."""

    @abstractmethod
    async def _get_by_id(self, tab_id: str) -> Tab | None:
        """Fetch and parse a single tab, or None if it does not exist."""

    # =========================================================================
    # Plumbing
    # =========================================================================

    async def _call[T](self, request: Callable[[], Awaitable[T]], options: SearchOptions) -> T:
        """Run one request with pacing, timeout and retry on transient errors."""
        attempts = options.retry_attempts or DEFAULT_RETRY_ATTEMPTS
        timeout = options.timeout_ms / 1000 if options.timeout_ms else None

        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(
                multiplier=self._RETRY_WAIT_MIN,
                min=self._RETRY_WAIT_MIN,
                max=self._RETRY_WAIT_MAX,
            ),
            retry=retry_if_exception(
                lambda e: is_retryable_error(e) and not is_rate_limit_error(e)
            ),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                await self._rate_limiter.acquire()
                if timeout is None:
                    return await request()
                return await asyncio.wait_for(request(), timeout=timeout)

        raise RuntimeError("Unexpected retry loop exit")

    def error_to_result(self, error: Exception, operation: str) -> SourceResult:
        """Translate a failure into the adapter result shape."""
        logger.warning(f"{self.site_name} scraping error in {operation}: {error!r}")

        if is_rate_limit_error(error):
            retry_after = DEFAULT_RETRY_AFTER
            if isinstance(error, RateLimitError):
                retry_after = int(error.retry_after)
            return SourceResult.failure(
                "Rate limit exceeded",
                rate_limit_hit=True,
                retry_after=retry_after,
            )

        status = getattr(error, "status", None)
        if isinstance(error, AccessDeniedError) or status in (401, 403):
            return SourceResult.failure(ACCESS_DENIED_MESSAGE)

        if isinstance(error, NotFoundError) or status == 404:
            return SourceResult.failure(NOT_FOUND_MESSAGE)

        if isinstance(error, TimeoutError):
            return SourceResult.failure(TIMEOUT_MESSAGE)

        return SourceResult.failure(str(error) or UNKNOWN_ERROR_MESSAGE)
