"""
Per-source health record.

Owned by ``SourceHealthRegistry``; everything outside the registry only
ever sees copies produced by ``snapshot()``.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class RateLimitStatus(Enum):
    """Throttling state of a source."""
    OK = "ok"
    LIMITED = "limited"  # Temporarily throttled, clears after retry_after
    BLOCKED = "blocked"  # Manually parked until explicitly released


@dataclass
class SourceHealth:
    """
    Health and participation state of a single source.

    ``success_rate`` and ``average_response_time_ms`` are exponential moving
    averages. ``rate_limited_until`` is a monotonic-clock deadline that is
    only meaningful while the status is LIMITED.
    """
    name: str
    is_active: bool = True
    last_used: datetime | None = None
    success_rate: float = 1.0
    average_response_time_ms: float = 0.0
    rate_limit_status: RateLimitStatus = RateLimitStatus.OK
    rate_limited_until: float | None = None

    def snapshot(self) -> SourceHealth:
        return dataclasses.replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "is_active": self.is_active,
            "last_used": self.last_used.isoformat() if self.last_used else None,
            "success_rate": round(self.success_rate, 4),
            "average_response_time_ms": round(self.average_response_time_ms, 2),
            "rate_limit_status": self.rate_limit_status.value,
        }
