"""
Tab - Standardized Result Model for Multi-Source Tab Search

Every source adapter normalizes what it scrapes into a ``Tab`` before
handing it to the aggregation engine. Tabs are immutable once returned.

Example:
    >>> tab = Tab(
    ...     id="ug_123",
    ...     source="ultimate-guitar",
    ...     song=SongInfo(title="Wonderwall", artist="Oasis"),
    ...     content="[Verse] Em7 G D A7sus4",
    ...     chords=("Em7", "G", "D", "A7sus4"),
    ...     rating=4.7,
    ...     difficulty=Difficulty.BEGINNER,
    ... )
    >>> tab.dedup_key
    'oasis-wonderwall'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Difficulty(Enum):
    """Playing difficulty, ordered beginner < intermediate < advanced."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        return _DIFFICULTY_RANK[self]


_DIFFICULTY_RANK: dict[Difficulty, int] = {
    Difficulty.BEGINNER: 1,
    Difficulty.INTERMEDIATE: 2,
    Difficulty.ADVANCED: 3,
}


class TabType(Enum):
    """Kind of arrangement a tab contains."""
    CHORDS = "chords"
    TABS = "tabs"
    BASS = "bass"
    UKULELE = "ukulele"


@dataclass(frozen=True)
class SongInfo:
    """Song the arrangement belongs to."""
    title: str
    artist: str
    album: str | None = None


@dataclass(frozen=True)
class Tab:
    """
    A single chord sheet or tablature scraped from one source.

    Identity is ``(source, id)``. ``source`` is the name the producing
    adapter is registered under.
    """
    id: str
    source: str
    song: SongInfo
    content: str = ""
    chords: tuple[str, ...] = field(default_factory=tuple)
    type: TabType = TabType.CHORDS
    rating: float | None = None
    difficulty: Difficulty | None = None
    source_url: str | None = None
    tuning: str | None = None
    capo: int | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of chord names but store an immutable tuple
        if not isinstance(self.chords, tuple):
            object.__setattr__(self, "chords", tuple(self.chords))

    @property
    def dedup_key(self) -> str:
        """Case-insensitive ``artist-title`` key used to collapse duplicates."""
        return f"{self.song.artist.lower()}-{self.song.title.lower()}"

    @property
    def identity(self) -> tuple[str, str]:
        return (self.source, self.id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "source": self.source,
            "song": {
                "title": self.song.title,
                "artist": self.song.artist,
                "album": self.song.album,
            },
            "content": self.content,
            "chords": list(self.chords),
            "type": self.type.value,
            "rating": self.rating,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "source_url": self.source_url,
            "tuning": self.tuning,
            "capo": self.capo,
        }
