"""
Result shapes exchanged between adapters, the engine and its callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .tab import Tab


@dataclass(frozen=True)
class SourceResult:
    """
    Outcome of a single adapter call.

    ``data`` holds the tabs on success (possibly empty). ``rate_limit_hit``
    tells the engine to park the source for ``retry_after`` seconds.
    """
    success: bool
    data: list[Tab] | None = None
    error: str | None = None
    rate_limit_hit: bool = False
    retry_after: int | None = None

    @classmethod
    def ok(cls, data: list[Tab]) -> SourceResult:
        return cls(success=True, data=list(data))

    @classmethod
    def failure(
        cls,
        error: str,
        *,
        rate_limit_hit: bool = False,
        retry_after: int | None = None,
    ) -> SourceResult:
        return cls(
            success=False,
            error=error,
            rate_limit_hit=rate_limit_hit,
            retry_after=retry_after,
        )


@dataclass
class AggregatedResult:
    """Composite answer to one multi-source search."""
    query: str
    total_results: int
    sources: list[str] = field(default_factory=list)
    results: list[Tab] = field(default_factory=list)
    search_time_ms: float = 0.0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "total_results": self.total_results,
            "sources": list(self.sources),
            "results": [tab.to_dict() for tab in self.results],
            "search_time_ms": round(self.search_time_ms, 2),
            "errors": list(self.errors),
        }
