"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for the track catalog.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from phantom_radio.domain.music.entities import Track


class TrackCatalog(ABC):
    """Abstract read-mostly catalog of curated tracks.

    The playback core never mutates catalog records apart from bumping
    play counters, which is best-effort and may be approximate.
    """

    @abstractmethod
    async def get_by_id(self, track_id: str) -> Track | None:
        """Fetch a single track.

        Args:
            track_id: The catalog identifier.

        Returns:
            The track if found, None otherwise.
        """
        ...

    @abstractmethod
    async def search(self, query: str, limit: int = 25) -> list[Track]:
        """Search tracks by title, artist or category.

        Args:
            query: Case-insensitive substring to match.
            limit: Maximum number of tracks to return.

        Returns:
            Matching tracks ordered by title.
        """
        ...

    @abstractmethod
    async def list_by_category(self, category: str) -> list[Track]:
        """List every track in a playlist category.

        Args:
            category: Category name, or ``"all"`` for the whole catalog.

        Returns:
            The category's tracks ordered by title.
        """
        ...

    @abstractmethod
    async def increment_play_count(self, track_id: str) -> None:
        """Record one more play of a track.

        Args:
            track_id: The catalog identifier.
        """
        ...
