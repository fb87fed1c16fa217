"""Source health tracking."""

from .registry import EMA_WEIGHT, SourceHealthRegistry, ema

__all__ = [
    "EMA_WEIGHT",
    "SourceHealthRegistry",
    "ema",
]
