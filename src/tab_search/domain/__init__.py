"""
Domain layer: result entities, request models and the adapter contract.
"""

from .entities import (
    AggregatedResult,
    Difficulty,
    RateLimitStatus,
    SearchFilters,
    SearchOptions,
    SongInfo,
    SourceHealth,
    SourceResult,
    Tab,
    TabType,
)
from .sources import TabSource

__all__ = [
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
]
