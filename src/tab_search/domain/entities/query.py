"""
Request models for a tab search.

Validated with pydantic because they arrive from the request-handling
layer; the rest of the domain uses plain dataclasses.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .tab import Difficulty

InstrumentType = Literal["guitar", "bass", "ukulele"]

DEFAULT_MAX_RESULTS = 20
DEFAULT_INSTRUMENT: InstrumentType = "guitar"


class SearchOptions(BaseModel):
    """Options forwarded to every source adapter."""

    model_config = ConfigDict(frozen=True)

    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1)
    instrument_type: InstrumentType = DEFAULT_INSTRUMENT
    include_ratings: bool = True
    preferred_difficulty: Difficulty | None = None
    timeout_ms: int | None = Field(default=None, gt=0)
    retry_attempts: int | None = Field(default=None, ge=1)


class SearchFilters(BaseModel):
    """Post-fetch constraints and source selection for one search."""

    model_config = ConfigDict(frozen=True)

    min_rating: float | None = Field(default=None, ge=0, le=5)
    max_difficulty: Difficulty | None = None
    preferred_sources: list[str] = Field(default_factory=list)
    exclude_sources: list[str] = Field(default_factory=list)
    require_chords: bool = False
    require_tabs: bool = False
