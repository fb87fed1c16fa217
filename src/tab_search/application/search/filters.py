"""
Post-fetch filter predicate for search results.

A tab is kept iff every supplied constraint passes. Absent values never
fail on their own: a tab without a rating passes ``min_rating`` and a tab
without a difficulty is treated as intermediate.
"""

from __future__ import annotations

from collections.abc import Iterable

from tab_search.domain.entities import Difficulty, SearchFilters, Tab, TabType

DEFAULT_DIFFICULTY = Difficulty.INTERMEDIATE


def difficulty_rank(difficulty: Difficulty | None) -> int:
    """Ordinal of a difficulty, beginner=1 < intermediate=2 < advanced=3."""
    return (difficulty or DEFAULT_DIFFICULTY).rank


def matches_filters(tab: Tab, filters: SearchFilters) -> bool:
    if filters.min_rating and tab.rating is not None and tab.rating < filters.min_rating:
        return False

    if filters.max_difficulty is not None:
        if difficulty_rank(tab.difficulty) > filters.max_difficulty.rank:
            return False

    if filters.require_chords and not tab.chords:
        return False

    if filters.require_tabs and tab.type is not TabType.TABS:
        return False

    return True


def apply_filters(tabs: Iterable[Tab], filters: SearchFilters | None) -> list[Tab]:
    """Keep the tabs that satisfy ``filters``, preserving order."""
    if filters is None:
        return list(tabs)
    return [tab for tab in tabs if matches_filters(tab, filters)]
