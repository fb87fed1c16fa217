"""
SourceHealthRegistry - Per-source participation and health tracking

Tracks, for every registered source adapter:
- Whether it is enabled (``is_active``)
- Success rate and average latency as exponential moving averages
- Rate-limit state (ok / limited / blocked)

and answers which adapters may take part in a search.

Rate limits are cleared lazily: a rate-limit event stores a deadline and
the status flips back to OK the first time the registry is consulted after
that deadline. A newer rate-limit event replaces the deadline, and a manual
status change discards it, so stale expiries can never clobber later state.

The registry never raises for unknown source names; such calls are no-ops.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone

from tab_search.core.exceptions import ConfigurationError, ErrorContext
from tab_search.domain.entities import RateLimitStatus, SearchFilters, SourceHealth
from tab_search.domain.sources import TabSource

logger = logging.getLogger(__name__)

# Smoothing weight for the moving averages: new = old * (1 - w) + sample * w
EMA_WEIGHT = 0.1


def ema(old: float, sample: float, weight: float = EMA_WEIGHT) -> float:
    return old * (1 - weight) + sample * weight


class SourceHealthRegistry:
    """
    Registry of source adapters and their health.

    Sources keep their registration order, which is also the order
    ``eligible()`` returns them in.

    Usage:
        registry = SourceHealthRegistry({"ultimate-guitar": ug, "e-chords": ec})

        for name, source in registry.eligible(filters):
            ...
        registry.record_outcome("e-chords", success=True, latency_ms=420.0)
        registry.record_rate_limit("ultimate-guitar", retry_after_seconds=30)
    """

    def __init__(
        self,
        sources: Mapping[str, TabSource] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize registry.

        Args:
            sources: Adapters to register, in participation order
            clock: Monotonic clock used for rate-limit deadlines
        """
        self._clock = clock
        self._sources: dict[str, TabSource] = {}
        self._health: dict[str, SourceHealth] = {}
        # Outcome updates are read-modify-write on a record
        self._lock = threading.Lock()

        for name, source in (sources or {}).items():
            self.register(name, source)

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, name: str, source: TabSource) -> None:
        """Register a source adapter. Names must be unique."""
        if name in self._sources:
            raise ConfigurationError(
                f"Source already registered: {name}",
                context=ErrorContext(operation="register", source=name),
            )
        self._sources[name] = source
        self._health[name] = SourceHealth(name=name)
        logger.info(f"Registered source: {name}")

    def names(self) -> list[str]:
        return list(self._sources)

    def get(self, name: str) -> TabSource | None:
        return self._sources.get(name)

    def items(self) -> list[tuple[str, TabSource]]:
        return list(self._sources.items())

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    # =========================================================================
    # Eligibility
    # =========================================================================

    def eligible(self, filters: SearchFilters | None = None) -> list[tuple[str, TabSource]]:
        """
        Sources allowed to take part in a search, in registration order.

        Excludes sources that are disabled, rate limited or blocked, and the
        names in ``filters.exclude_sources``. A non-empty
        ``filters.preferred_sources`` restricts the set to those names.
        """
        filters = filters or SearchFilters()
        excluded = set(filters.exclude_sources)
        preferred = set(filters.preferred_sources)

        selected: list[tuple[str, TabSource]] = []
        with self._lock:
            for name, source in self._sources.items():
                health = self._health[name]
                self._refresh(health)

                if not health.is_active or health.rate_limit_status is not RateLimitStatus.OK:
                    continue
                if name in excluded:
                    continue
                if preferred and name not in preferred:
                    continue
                selected.append((name, source))

        return selected

    # =========================================================================
    # Updates
    # =========================================================================

    def record_outcome(self, name: str, success: bool, latency_ms: float) -> None:
        """
        Fold one call outcome into the moving averages.

        Latency is only sampled when positive, so failures that never reached
        the site do not drag the average towards zero.
        """
        with self._lock:
            health = self._health.get(name)
            if health is None:
                return

            health.last_used = datetime.now(timezone.utc)
            health.success_rate = ema(health.success_rate, 1.0 if success else 0.0)
            if latency_ms > 0:
                health.average_response_time_ms = ema(health.average_response_time_ms, latency_ms)

    def record_rate_limit(self, name: str, retry_after_seconds: float) -> None:
        """
        Park a source as LIMITED until ``retry_after_seconds`` from now.

        A manually blocked source stays blocked and gets no deadline.
        """
        with self._lock:
            health = self._health.get(name)
            if health is None:
                return
            if health.rate_limit_status is RateLimitStatus.BLOCKED:
                logger.info(f"Rate limit for {name} ignored, source is blocked")
                return

            health.rate_limit_status = RateLimitStatus.LIMITED
            health.rate_limited_until = self._clock() + max(0.0, retry_after_seconds)

        logger.warning(f"Rate limit hit for {name}, retry in {retry_after_seconds}s")

    def set_active(self, name: str, active: bool) -> None:
        """Enable or disable a source for subsequent searches."""
        with self._lock:
            health = self._health.get(name)
            if health is None:
                return
            health.is_active = active

    def set_rate_limit_status(self, name: str, status: RateLimitStatus) -> None:
        """Manually set the throttling state, e.g. to block a misbehaving source."""
        with self._lock:
            health = self._health.get(name)
            if health is None:
                return
            health.rate_limit_status = status
            # A manual change supersedes any pending automatic expiry
            health.rate_limited_until = None
        logger.info(f"Rate limit status for {name} set to {status.value}")

    # =========================================================================
    # Inspection
    # =========================================================================

    def snapshot(self, name: str) -> SourceHealth | None:
        """Copy of one source's health record, or None if unknown."""
        with self._lock:
            health = self._health.get(name)
            if health is None:
                return None
            self._refresh(health)
            return health.snapshot()

    def snapshots(self) -> list[SourceHealth]:
        """Copies of all health records, in registration order."""
        with self._lock:
            result = []
            for health in self._health.values():
                self._refresh(health)
                result.append(health.snapshot())
            return result

    def _refresh(self, health: SourceHealth) -> None:
        """Clear an elapsed rate limit. Caller holds the lock."""
        if health.rate_limit_status is not RateLimitStatus.LIMITED:
            return
        if health.rate_limited_until is None or self._clock() < health.rate_limited_until:
            return

        health.rate_limit_status = RateLimitStatus.OK
        health.rate_limited_until = None
        logger.info(f"Rate limit cleared for {health.name}")
