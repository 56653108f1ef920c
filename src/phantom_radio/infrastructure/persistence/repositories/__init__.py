"""SQLite repository implementations."""

from phantom_radio.infrastructure.persistence.repositories.track_repository import (
    SQLiteTrackCatalog,
)

__all__ = [
    "SQLiteTrackCatalog",
]
