"""
Cache Infrastructure

Provides the TTL cache for aggregated search results.
"""

from __future__ import annotations

from tab_search.infrastructure.cache.result_cache import (
    CacheStats,
    ResultCache,
    make_cache_key,
)

__all__ = [
    "CacheStats",
    "ResultCache",
    "make_cache_key",
]
