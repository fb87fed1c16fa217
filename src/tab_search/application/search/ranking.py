"""
ResultRanker - Cross-source deduplication and ordering

1. Deduplication by case-insensitive ``artist-title`` key. The first
   occurrence wins, so the input order (source participation order, then
   each source's own order) decides which copy survives, except that a
   primary-source copy rated within the tie band replaces the kept copy.
2. Ranking by:
   a. rating, descending (missing rating counts as 0). Ratings closer than
      ``RATING_TIE_BAND`` are a tie.
   b. the primary source before any other source.
   c. case-insensitive title.

Ties under (a) are not transitive (4.0 ~ 4.05 ~ 4.1 but 4.0 < 4.1), so the
comparator is applied with a stable sort and the outcome depends on input
order for such chains.

Example:
    >>> ranker = ResultRanker(primary_source="ultimate-guitar")
    >>> ranked, stats = ranker.dedupe_and_rank(tabs)
    >>> stats.duplicates_removed
    2
"""

from __future__ import annotations

import functools
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from tab_search.domain.entities import Tab

RATING_TIE_BAND = 0.1
# Float slack so that a 0.1 step such as 4.5 -> 4.6 still counts as decisive
_BAND_EPSILON = 1e-9

DEFAULT_PRIMARY_SOURCE = "ultimate-guitar"


def _is_decisive(rating_diff: float) -> bool:
    return abs(rating_diff) >= RATING_TIE_BAND - _BAND_EPSILON


@dataclass
class RankingStats:
    """Statistics from one dedupe-and-rank pass."""

    total_input: int = 0
    unique_results: int = 0
    duplicates_removed: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_input": self.total_input,
            "unique_results": self.unique_results,
            "duplicates_removed": self.duplicates_removed,
            "by_source": self.by_source,
        }


class ResultRanker:
    """Deduplicates and orders tabs gathered from several sources."""

    def __init__(self, primary_source: str = DEFAULT_PRIMARY_SOURCE):
        self.primary_source = primary_source

    def deduplicate(self, tabs: Iterable[Tab]) -> list[Tab]:
        """
        Keep one copy per ``artist-title`` key, the first one seen.

        A later copy from the primary source replaces a non-primary copy
        whose rating is within the tie band, keeping the original position.
        """
        position: dict[str, int] = {}
        unique: list[Tab] = []
        for tab in tabs:
            key = tab.dedup_key
            index = position.get(key)
            if index is None:
                position[key] = len(unique)
                unique.append(tab)
            elif self._prefer_primary(unique[index], tab):
                unique[index] = tab
        return unique

    def _prefer_primary(self, kept: Tab, candidate: Tab) -> bool:
        return (
            candidate.source == self.primary_source
            and kept.source != self.primary_source
            and not _is_decisive((kept.rating or 0) - (candidate.rating or 0))
        )

    def compare(self, a: Tab, b: Tab) -> int:
        """Comparator: negative if ``a`` ranks before ``b``."""
        rating_diff = (b.rating or 0) - (a.rating or 0)
        if _is_decisive(rating_diff):
            return -1 if rating_diff < 0 else 1

        if a.source != b.source:
            if a.source == self.primary_source:
                return -1
            if b.source == self.primary_source:
                return 1

        a_title = a.song.title.casefold()
        b_title = b.song.title.casefold()
        return (a_title > b_title) - (a_title < b_title)

    def rank(self, tabs: Iterable[Tab]) -> list[Tab]:
        return sorted(tabs, key=functools.cmp_to_key(self.compare))

    def dedupe_and_rank(self, tabs: Iterable[Tab]) -> tuple[list[Tab], RankingStats]:
        """
        Convenience method: deduplicate then rank in one call.

        Returns:
            Tuple of (ranked tabs, ranking statistics)
        """
        all_tabs = list(tabs)
        stats = RankingStats(total_input=len(all_tabs))
        for tab in all_tabs:
            stats.by_source[tab.source] = stats.by_source.get(tab.source, 0) + 1

        unique = self.deduplicate(all_tabs)
        stats.unique_results = len(unique)
        stats.duplicates_removed = stats.total_input - stats.unique_results

        return self.rank(unique), stats
