"""Domain entities for tab search."""

from .query import SearchFilters, SearchOptions
from .results import AggregatedResult, SourceResult
from .source_health import RateLimitStatus, SourceHealth
from .tab import Difficulty, SongInfo, Tab, TabType

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
    "TabType",
]
