"""
Search application services.

- ``AggregationEngine``: fan-out, merge, cache
- ``ResultRanker``: deduplication and ordering
- ``apply_filters`` / ``matches_filters``: post-fetch constraints
"""

from .engine import NO_ACTIVE_SOURCES_ERROR, AggregationEngine
from .filters import apply_filters, difficulty_rank, matches_filters
from .ranking import (
    DEFAULT_PRIMARY_SOURCE,
    RATING_TIE_BAND,
    RankingStats,
    ResultRanker,
)

__all__ = [
    "AggregationEngine",
    "DEFAULT_PRIMARY_SOURCE",
    "NO_ACTIVE_SOURCES_ERROR",
    "RATING_TIE_BAND",
    "RankingStats",
    "ResultRanker",
    "apply_filters",
    "difficulty_rank",
    "matches_filters",
]
