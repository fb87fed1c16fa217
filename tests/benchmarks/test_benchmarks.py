"""
Performance benchmarks for key code paths.

Run with::

    pytest tests/benchmarks/ --benchmark-only

Baselines are stored in ``.benchmarks/`` (git-ignored).
"""

from __future__ import annotations

import pytest

from tab_search.container import create_container
from tab_search.domain.entities import Difficulty, SearchFilters, SearchOptions, SongInfo, Tab

SOURCES = ("ultimate-guitar", "e-chords", "songsterr")


@pytest.fixture()
def merged_tabs() -> list[Tab]:
    """150 tabs from three sources, a third of them duplicates."""
    return [
        Tab(
            id=f"{source}_{i}",
            source=source,
            song=SongInfo(title=f"Song {i % 100}", artist=f"Artist {i % 100}"),
            rating=3.0 + (i % 20) / 10,
            difficulty=list(Difficulty)[i % 3],
        )
        for i, source in ((i, SOURCES[i % 3]) for i in range(150))
    ]


# ============================================================================
# Benchmark: DI Container
# ============================================================================


class TestContainerBenchmarks:
    """Benchmark DI container creation and resolution."""

    def test_container_creation(self, benchmark: pytest.BenchmarkFixture) -> None:
        """Container construction with config should be < 1 ms."""
        benchmark(create_container, sources={})

    def test_singleton_resolution(self, benchmark: pytest.BenchmarkFixture) -> None:
        """Subsequent singleton lookups should be < 10 µs."""
        container = create_container(sources={})
        # warm up: create the singleton
        container.engine()

        benchmark(container.engine)


# ============================================================================
# Benchmark: Merge pipeline
# ============================================================================


class TestMergeBenchmarks:
    """Benchmark filter, dedupe and rank on a realistic fan-out."""

    def test_dedupe_and_rank(self, benchmark: pytest.BenchmarkFixture, merged_tabs: list[Tab]) -> None:
        """Deduplicating and ranking 150 tabs should be < 2 ms."""
        from tab_search.application.search import ResultRanker

        ranker = ResultRanker()
        benchmark(ranker.dedupe_and_rank, merged_tabs)

    def test_apply_filters(self, benchmark: pytest.BenchmarkFixture, merged_tabs: list[Tab]) -> None:
        """Filtering 150 tabs should be < 1 ms."""
        from tab_search.application.search import apply_filters

        filters = SearchFilters(min_rating=4.0, max_difficulty=Difficulty.INTERMEDIATE)
        benchmark(apply_filters, merged_tabs, filters)


# ============================================================================
# Benchmark: Result cache
# ============================================================================


class TestCacheBenchmarks:
    """Benchmark cache key derivation and lookup."""

    def test_make_cache_key(self, benchmark: pytest.BenchmarkFixture) -> None:
        """Hashing a query with options and filters should be < 50 µs."""
        from tab_search.infrastructure.cache import make_cache_key

        options = SearchOptions(max_results=10, instrument_type="guitar")
        filters = SearchFilters(min_rating=4.0, exclude_sources=["songsterr"])
        benchmark(make_cache_key, "Hotel California", options, filters)

    def test_put_and_get(self, benchmark: pytest.BenchmarkFixture, merged_tabs: list[Tab]) -> None:
        """Storing and reading back 150 tabs should be < 50 µs."""
        from tab_search.infrastructure.cache import ResultCache

        cache = ResultCache()

        def _put_and_get() -> list[Tab] | None:
            cache.put("bench", merged_tabs)
            return cache.get("bench")

        benchmark(_put_and_get)
