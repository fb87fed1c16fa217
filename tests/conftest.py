"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from tab_search.domain.entities import (
    Difficulty,
    SongInfo,
    SourceResult,
    Tab,
    TabType,
)

# ============================================================
# Clock
# ============================================================


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ============================================================
# Tabs
# ============================================================


@pytest.fixture
def make_tab():
    """Factory for Tab instances with sensible defaults."""

    def _create(
        title: str = "Wonderwall",
        artist: str = "Oasis",
        source: str = "ultimate-guitar",
        tab_id: str | None = None,
        rating: float | None = 4.5,
        difficulty: Difficulty | None = Difficulty.BEGINNER,
        chords: tuple[str, ...] = ("Em7", "G", "D", "A7sus4"),
        tab_type: TabType = TabType.CHORDS,
    ) -> Tab:
        return Tab(
            id=tab_id or f"{source}_{artist}_{title}".lower().replace(" ", "_"),
            source=source,
            song=SongInfo(title=title, artist=artist),
            content=f"{title} by {artist}",
            chords=chords,
            type=tab_type,
            rating=rating,
            difficulty=difficulty,
        )

    return _create


@pytest.fixture
def catalog(make_tab):
    """A small catalogue of well-known songs."""
    return [
        make_tab("Wonderwall", "Oasis", rating=4.7, difficulty=Difficulty.BEGINNER),
        make_tab("Stairway to Heaven", "Led Zeppelin", rating=4.9, difficulty=Difficulty.INTERMEDIATE),
        make_tab("Hotel California", "Eagles", rating=4.8, difficulty=Difficulty.ADVANCED),
        make_tab("Blackbird", "The Beatles", rating=4.8, difficulty=Difficulty.INTERMEDIATE),
        make_tab("Creep", "Radiohead", rating=4.6, difficulty=Difficulty.BEGINNER),
    ]


# ============================================================
# Mock Sources
# ============================================================


@pytest.fixture
def mock_source():
    """Factory for AsyncMock adapters returning a fixed SourceResult."""

    def _create(result: SourceResult | None = None, side_effect=None) -> AsyncMock:
        source = AsyncMock()
        if side_effect is not None:
            source.search.side_effect = side_effect
        else:
            source.search.return_value = result or SourceResult.ok([])
        source.get_by_id.return_value = SourceResult.ok([])
        return source

    return _create
