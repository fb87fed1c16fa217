"""
Result Cache

In-memory cache with TTL for aggregated search results.
Uses cachetools.TTLCache for LRU eviction and TTL expiration.

Features:
- Write-once entries keyed by a fingerprint of the normalized request
- Time-based expiration (TTL) via cachetools plus an explicit sweep
- Hit/miss statistics
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from cachetools import TTLCache

from tab_search.domain.entities import SearchFilters, SearchOptions, Tab
from tab_search.domain.entities.tab import Difficulty

logger = logging.getLogger(__name__)

DEFAULT_TTL = 600.0  # 10 minutes
DEFAULT_MAX_SIZE = 1000


def make_cache_key(
    query: str,
    options: SearchOptions | None = None,
    filters: SearchFilters | None = None,
) -> str:
    """
    Build the cache fingerprint for a search.

    Pure function of the normalized inputs: the query is trimmed and
    lower-cased, omitted options take their defaults and source lists are
    sorted, so equivalent requests always collide.
    """
    options = options or SearchOptions()
    filters = filters or SearchFilters()

    key_data = {
        "query": query.strip().lower(),
        "max_results": options.max_results,
        "instrument_type": options.instrument_type,
        "min_rating": filters.min_rating or 0,
        "max_difficulty": (filters.max_difficulty or Difficulty.ADVANCED).value,
        "sources": ",".join(sorted(filters.preferred_sources)) or "all",
        "exclude": ",".join(sorted(filters.exclude_sources)) or "none",
        "require_chords": filters.require_chords,
        "require_tabs": filters.require_tabs,
    }
    payload = json.dumps(key_data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class ResultCache:
    """
    In-memory cache for ranked search results.

    Entries are never mutated after ``put``; readers get a fresh list.
    Empty result sets are never stored so failed searches are always retried.

    Example:
        cache = ResultCache(ttl=600)
        key = make_cache_key("wonderwall", options, filters)

        cache.put(key, ranked_tabs)
        tabs = cache.get(key)

        # Called from a periodic background job
        cache.cleanup()
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_size: int = DEFAULT_MAX_SIZE,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            ttl: Time-to-live in seconds
            max_size: Maximum number of entries (LRU eviction beyond it)
            timer: Clock used for expiry, injectable for tests
        """
        self._cache: TTLCache[str, tuple[Tab, ...]] = TTLCache(
            maxsize=max_size, ttl=ttl, timer=timer
        )
        self._stats = CacheStats()

    @property
    def ttl(self) -> float:
        return self._cache.ttl

    @property
    def max_size(self) -> int:
        return int(self._cache.maxsize)

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def get(self, key: str) -> list[Tab] | None:
        """
        Get cached results.

        Returns:
            Copy of the cached tab list, or None if not found/expired
        """
        try:
            value = self._cache[key]
        except KeyError:
            self._stats.misses += 1
            return None
        self._stats.hits += 1
        return list(value)

    def put(self, key: str, value: Sequence[Tab]) -> None:
        """Store a non-empty result list. Empty lists are ignored."""
        if not value:
            logger.debug(f"Not caching empty result set for {key[:12]}")
            return
        self._cache[key] = tuple(value)

    def cleanup(self) -> int:
        """
        Remove all expired entries.

        Returns:
            Number of entries removed
        """
        expired = self._cache.expire()
        removed = len(expired)
        self._stats.expirations += removed
        return removed

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        count = len(self._cache)
        self._cache.clear()
        return count

    def size(self) -> int:
        return len(self._cache)

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return key in self._cache


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        """Total cache requests."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        """Reset statistics."""
        self.hits = 0
        self.misses = 0
        self.expirations = 0
