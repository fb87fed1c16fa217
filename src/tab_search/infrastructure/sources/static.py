"""
In-memory catalogue source.

Serves a fixed list of tabs. Useful for offline development, demos and as a
fallback source that never hits the network.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable

from tab_search.domain.entities import SearchOptions, Tab

from .base import BaseTabSource

logger = logging.getLogger(__name__)


class StaticCatalogSource(BaseTabSource):
    """
    Source adapter backed by a static catalogue.

    ``search`` matches the lower-cased query as a substring of the title or
    the artist; a blank query returns the whole catalogue. Results keep
    catalogue order and are truncated to ``options.max_results``.
    """

    def __init__(
        self,
        name: str,
        tabs: Iterable[Tab] = (),
        requests_per_minute: float = 600,
    ) -> None:
        super().__init__(name, requests_per_minute=requests_per_minute)
        self._tabs: list[Tab] = [
            tab if tab.source == name else dataclasses.replace(tab, source=name)
            for tab in tabs
        ]
        logger.debug(f"{name}: catalogue loaded with {len(self._tabs)} tabs")

    def __len__(self) -> int:
        return len(self._tabs)

    async def _search(self, query: str, options: SearchOptions) -> list[Tab]:
        needle = query.strip().lower()
        if not needle:
            matches = self._tabs
        else:
            matches = [
                tab
                for tab in self._tabs
                if needle in tab.song.title.lower() or needle in tab.song.artist.lower()
            ]
        return matches[: options.max_results]

    async def _get_by_id(self, tab_id: str) -> Tab | None:
        return next((tab for tab in self._tabs if tab.id == tab_id), None)
