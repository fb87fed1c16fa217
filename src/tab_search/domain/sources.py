"""
Source adapter contract.

A source adapter wraps one content provider. The engine only ever talks to
adapters through this protocol, so concrete scrapers, test doubles and
in-memory catalogues are interchangeable.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .entities import SearchOptions, SourceResult


@runtime_checkable
class TabSource(Protocol):
    """Capability set every adapter exposes: ``search`` and ``get_by_id``."""

    async def search(self, query: str, options: SearchOptions) -> SourceResult:
        """Search the source. ``data`` holds the matching tabs in source order."""
        ...

    async def get_by_id(self, tab_id: str) -> SourceResult:
        """Fetch one tab by its source-specific id (``data`` holds 0 or 1 item)."""
        ...
