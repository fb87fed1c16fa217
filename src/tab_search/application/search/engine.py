"""
AggregationEngine - Multi-source tab search

Fans one query out to every eligible source adapter, waits for all of them
to settle, then filters, deduplicates, ranks and caches the merged result.

Flow:
    search(query, options, filters)
      -> cache lookup (hit returns immediately)
      -> SourceHealthRegistry.eligible(filters)
      -> concurrent adapter.search() calls, no fail-fast
      -> per source: filter results, record health, handle rate limits
      -> dedupe + rank
      -> cache non-empty results
      -> AggregatedResult

Source failures never propagate: they come back as ``"<source>: <message>"``
strings in ``AggregatedResult.errors`` alongside whatever the healthy
sources returned.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from tab_search.application.health import SourceHealthRegistry
from tab_search.core.async_utils import PeriodicTask, gather_settled
from tab_search.domain.entities import (
    AggregatedResult,
    SearchFilters,
    SearchOptions,
    SourceHealth,
    SourceResult,
    Tab,
)
from tab_search.domain.sources import TabSource
from tab_search.infrastructure.cache import ResultCache, make_cache_key
from tab_search.shared.log_buffer import LogBuffer, LogEntry

from .filters import apply_filters
from .ranking import DEFAULT_PRIMARY_SOURCE, ResultRanker

logger = logging.getLogger(__name__)

NO_ACTIVE_SOURCES_ERROR = "No active scrapers available"
UNKNOWN_ERROR = "Unknown error"
DEFAULT_RETRY_AFTER = 60  # seconds
DEFAULT_CLEANUP_INTERVAL = 600.0  # 10 minutes
HEALTH_CHECK_QUERY = "test"


@dataclass
class _SourceOutcome:
    """Settled result of one adapter call."""

    name: str
    elapsed_ms: float
    result: SourceResult | None = None
    error: Exception | None = None


class AggregationEngine:
    """
    Orchestrates concurrent searches across registered tab sources.

    Usage:
        registry = SourceHealthRegistry({"ultimate-guitar": ug, "e-chords": ec})
        async with AggregationEngine(registry, ResultCache()) as engine:
            result = await engine.search(
                "wonderwall",
                SearchOptions(max_results=10),
                SearchFilters(max_difficulty=Difficulty.INTERMEDIATE),
            )
    """

    def __init__(
        self,
        registry: SourceHealthRegistry,
        cache: ResultCache | None = None,
        primary_source: str = DEFAULT_PRIMARY_SOURCE,
        cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL,
        default_retry_after: int = DEFAULT_RETRY_AFTER,
        log_buffer: LogBuffer | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Initialize engine.

        Args:
            registry: Source adapters and their health state
            cache: Result cache (a default 10-minute cache if omitted)
            primary_source: Source preferred when ratings tie
            cleanup_interval: Seconds between cache sweeps once started
            default_retry_after: Rate-limit pause when a source gives none
            log_buffer: Optional in-memory log buffer exposed via get_logs()
            clock: Timer for search_time_ms, in seconds
        """
        self._registry = registry
        self._cache = cache if cache is not None else ResultCache()
        self._ranker = ResultRanker(primary_source=primary_source)
        self._default_retry_after = default_retry_after
        self._log_buffer = log_buffer
        self._clock = clock
        self._sweeper = PeriodicTask(
            self._sweep_cache,
            interval=cleanup_interval,
            name="tab-search-cache-cleanup",
        )

        logger.info(f"Initialized {len(registry)} sources")

    @property
    def registry(self) -> SourceHealthRegistry:
        return self._registry

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the periodic cache sweep (requires a running event loop)."""
        self._sweeper.start()

    async def aclose(self) -> None:
        await self._sweeper.stop()

    async def __aenter__(self) -> AggregationEngine:
        self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    def _sweep_cache(self) -> None:
        removed = self._cache.cleanup()
        logger.info(f"Cache cleanup completed: {removed} expired entries removed")

    # =========================================================================
    # Search
    # =========================================================================

    async def search(
        self,
        query: str,
        options: SearchOptions | None = None,
        filters: SearchFilters | None = None,
    ) -> AggregatedResult:
        """
        Search every eligible source and merge the results.

        Never raises for source failures; see ``AggregatedResult.errors``.
        """
        start = self._clock()
        options = options or SearchOptions()
        filters = filters or SearchFilters()
        cache_key = make_cache_key(query, options, filters)

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for query: {query}")
            return AggregatedResult(
                query=query,
                total_results=len(cached),
                sources=list(dict.fromkeys(tab.source for tab in cached)),
                results=cached,
                search_time_ms=self._elapsed_ms(start),
                errors=[],
            )

        eligible = self._registry.eligible(filters)
        if not eligible:
            logger.warning(f"No eligible sources for query: {query}")
            return AggregatedResult(
                query=query,
                total_results=0,
                search_time_ms=self._elapsed_ms(start),
                errors=[NO_ACTIVE_SOURCES_ERROR],
            )

        outcomes = await gather_settled(
            *(self._query_source(name, source, query, options) for name, source in eligible)
        )

        errors: list[str] = []
        provenance: list[tuple[str, Tab]] = []
        for outcome in outcomes:
            # _query_source captures its own failures; this guards the barrier itself
            if isinstance(outcome, Exception):
                logger.error(f"Unexpected fan-out failure: {outcome!r}")
                continue
            errors.extend(self._absorb_outcome(outcome, query, filters, provenance))

        ranked, stats = self._ranker.dedupe_and_rank(tab for _, tab in provenance)
        survivors = {id(tab) for tab in ranked}
        sources = list(dict.fromkeys(name for name, tab in provenance if id(tab) in survivors))

        if ranked:
            self._cache.put(cache_key, ranked)

        search_time_ms = self._elapsed_ms(start)
        logger.info(
            f"Search completed: {len(ranked)} total results from {len(sources)} sources "
            f"in {search_time_ms:.0f}ms ({stats.duplicates_removed} duplicates removed)"
        )

        return AggregatedResult(
            query=query,
            total_results=len(ranked),
            sources=sources,
            results=ranked,
            search_time_ms=search_time_ms,
            errors=errors,
        )

    async def _query_source(
        self,
        name: str,
        source: TabSource,
        query: str,
        options: SearchOptions,
    ) -> _SourceOutcome:
        started = self._clock()
        logger.info(f"Searching {name} for: {query}")
        try:
            result = await source.search(query, options)
            if not isinstance(result, SourceResult):
                raise TypeError(f"search() returned {type(result).__name__}, expected SourceResult")
        except Exception as e:
            return _SourceOutcome(name=name, elapsed_ms=self._elapsed_ms(started), error=e)
        return _SourceOutcome(name=name, elapsed_ms=self._elapsed_ms(started), result=result)

    def _absorb_outcome(
        self,
        outcome: _SourceOutcome,
        query: str,
        filters: SearchFilters,
        provenance: list[tuple[str, Tab]],
    ) -> list[str]:
        """Record health for one settled call and collect its tabs. Returns error strings."""
        name = outcome.name

        if outcome.error is not None:
            message = str(outcome.error) or UNKNOWN_ERROR
            self._registry.record_outcome(name, False, 0)
            logger.error(f"{name} search error: {message}")
            return [f"{name}: {message}"]

        result = outcome.result
        assert result is not None
        errors: list[str] = []

        self._registry.record_outcome(name, result.success, outcome.elapsed_ms)

        if result.success and result.data:
            kept = apply_filters(result.data, filters)
            provenance.extend((name, tab) for tab in kept)
            logger.info(f"{name} returned {len(kept)} results for: {query}")
        elif result.error:
            errors.append(f"{name}: {result.error}")
            logger.warning(f"{name} search failed: {result.error}")

        if result.rate_limit_hit:
            self._registry.record_rate_limit(name, result.retry_after or self._default_retry_after)

        return errors

    # =========================================================================
    # Single tab lookup
    # =========================================================================

    async def get_by_id(self, source: str, external_id: str) -> Tab | None:
        """Fetch one tab from a named source. Returns None when unavailable."""
        adapter = self._registry.get(source)
        if adapter is None:
            logger.error(f"Scraper not found: {source}")
            return None

        try:
            result = await adapter.get_by_id(external_id)
            if not isinstance(result, SourceResult):
                raise TypeError(f"get_by_id() returned {type(result).__name__}, expected SourceResult")
        except Exception as e:
            logger.error(f"Error retrieving tab {external_id} from {source}: {str(e) or UNKNOWN_ERROR}")
            return None

        if result.success and result.data:
            logger.info(f"Retrieved tab {external_id} from {source}")
            return result.data[0]

        logger.warning(f"Failed to retrieve tab {external_id} from {source}: {result.error}")
        return None

    # =========================================================================
    # Health
    # =========================================================================

    async def health_check(self) -> dict[str, bool]:
        """
        Probe every registered source with a one-result search.

        A source counts as healthy when the probe succeeds or when it did
        not signal a rate limit. Probes that raise count as unhealthy.
        Health state in the registry is left untouched.
        """
        probe_options = SearchOptions(max_results=1)
        sources = self._registry.items()

        outcomes = await gather_settled(
            *(source.search(HEALTH_CHECK_QUERY, probe_options) for _, source in sources)
        )

        health: dict[str, bool] = {}
        for (name, _), outcome in zip(sources, outcomes):
            if isinstance(outcome, Exception) or not isinstance(outcome, SourceResult):
                health[name] = False
            else:
                health[name] = outcome.success or not outcome.rate_limit_hit
        return health

    # =========================================================================
    # Management
    # =========================================================================

    def list_sources(self) -> list[str]:
        return self._registry.names()

    def get_source_info(self) -> list[SourceHealth]:
        return self._registry.snapshots()

    def set_source_active(self, name: str, active: bool) -> None:
        if name not in self._registry:
            return
        self._registry.set_active(name, active)
        logger.info(f"Scraper {name} {'enabled' if active else 'disabled'}")

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("Cache cleared")

    def get_cache_stats(self) -> dict[str, float]:
        return {
            "size": self._cache.size(),
            "hit_rate": self._cache.stats.hit_rate,
        }

    def get_logs(self, level: str | None = None, context: str | None = None) -> list[LogEntry]:
        if self._log_buffer is None:
            return []
        return self._log_buffer.get_logs(level=level, context=context)

    def _elapsed_ms(self, start: float) -> float:
        return (self._clock() - start) * 1000
