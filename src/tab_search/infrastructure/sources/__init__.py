"""
Source adapters.

Concrete site scrapers subclass ``BaseTabSource``; ``StaticCatalogSource``
serves an in-memory catalogue.
"""

from .base import BaseTabSource
from .static import StaticCatalogSource

__all__ = [
    "BaseTabSource",
    "StaticCatalogSource",
]
