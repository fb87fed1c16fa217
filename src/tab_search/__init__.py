"""
Tab Search - Multi-Source Chord & Tab Search Aggregation

Fans a song query out to several tab/chord source adapters, merges their
results, removes duplicates, ranks them, applies user filters and caches
the composite answer. Per-source health (success rate, latency, rate-limit
state) decides which sources take part in later searches.

Usage:
    from tab_search import (
        AggregationEngine, ResultCache, SourceHealthRegistry, SearchFilters,
    )

    registry = SourceHealthRegistry({"ultimate-guitar": ug, "e-chords": echords})
    async with AggregationEngine(registry, ResultCache()) as engine:
        result = await engine.search("wonderwall", filters=SearchFilters(min_rating=4.0))

    for tab in result.results:
        print(f"{tab.song.artist} - {tab.song.title} ({tab.source})")

Features:
    - Concurrent fan-out with wait-for-all, no fail-fast
    - Case-insensitive artist/title deduplication
    - Rating ranking with a tie band and primary-source preference
    - Rating / difficulty / chords / tablature filters
    - TTL result cache with periodic sweep
    - Source health: moving-average success rate and latency, rate limits
"""

from .application.health import SourceHealthRegistry
from .application.search import (
    NO_ACTIVE_SOURCES_ERROR,
    AggregationEngine,
    ResultRanker,
    apply_filters,
)
from .domain import (
    AggregatedResult,
    Difficulty,
    RateLimitStatus,
    SearchFilters,
    SearchOptions,
    SongInfo,
    SourceHealth,
    SourceResult,
    Tab,
    TabSource,
    TabType,
)
from .infrastructure.cache import ResultCache, make_cache_key
from .infrastructure.sources import BaseTabSource, StaticCatalogSource

__version__ = "0.1.0"

__all__ = [
    # Engine
    "AggregationEngine",
    "SourceHealthRegistry",
    "ResultCache",
    "ResultRanker",
    "make_cache_key",
    "apply_filters",
    "NO_ACTIVE_SOURCES_ERROR",
    # Domain
    "AggregatedResult",
    "Difficulty",
    "RateLimitStatus",
    "SearchFilters",
    "SearchOptions",
    "SongInfo",
    "SourceHealth",
    "SourceResult",
    "Tab",
    "TabSource",
    "TabType",
    # Adapters
    "BaseTabSource",
    "StaticCatalogSource",
]
