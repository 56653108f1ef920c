"""SQLite implementation of the reference track catalog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from phantom_radio.domain.music.entities import Track
from phantom_radio.domain.music.repository import TrackCatalog
from phantom_radio.domain.music.value_objects import LocalFileSource, StreamSource, TrackId
from phantom_radio.domain.shared.constants import CatalogConstants, DatabaseTables
from phantom_radio.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)

_TABLE = DatabaseTables.TRACKS


class SQLiteTrackCatalog(TrackCatalog):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_by_id(self, track_id: str) -> Track | None:
        row = await self._db.fetch_one(
            f"SELECT * FROM {_TABLE} WHERE track_id = ?",  # noqa: S608
            (track_id,),
        )
        return self._row_to_track(row) if row else None

    async def search(self, query: str, limit: int = 25) -> list[Track]:
        pattern = f"%{query.strip()}%"
        rows = await self._db.fetch_all(
            f"""
            SELECT * FROM {_TABLE}
            WHERE title LIKE ? OR artist LIKE ? OR track_id LIKE ?
            ORDER BY title COLLATE NOCASE
            LIMIT ?
            """,  # noqa: S608
            (pattern, pattern, pattern, limit),
        )
        return [self._row_to_track(row) for row in rows]

    async def list_by_category(self, category: str) -> list[Track]:
        if category == CatalogConstants.ALL_CATEGORIES:
            rows = await self._db.fetch_all(
                f"SELECT * FROM {_TABLE} ORDER BY title COLLATE NOCASE"  # noqa: S608
            )
        else:
            rows = await self._db.fetch_all(
                f"SELECT * FROM {_TABLE} WHERE category = ? ORDER BY title COLLATE NOCASE",  # noqa: S608
                (category,),
            )
        return [self._row_to_track(row) for row in rows]

    async def increment_play_count(self, track_id: str) -> None:
        await self._db.execute(
            f"UPDATE {_TABLE} SET play_count = play_count + 1 WHERE track_id = ?",  # noqa: S608
            (track_id,),
        )

    async def get_play_count(self, track_id: str) -> int:
        row = await self._db.fetch_one(
            f"SELECT play_count FROM {_TABLE} WHERE track_id = ?",  # noqa: S608
            (track_id,),
        )
        return row["play_count"] if row else 0

    async def upsert(self, track: Track) -> None:
        """Insert a track or refresh its metadata, keeping the play count."""
        source = track.audio_source
        source_value = (
            source.relative_path if isinstance(source, LocalFileSource) else source.url
        )
        await self._db.execute(
            f"""
            INSERT INTO {_TABLE} (
                track_id, title, artist, duration_seconds, category,
                source_kind, source_value
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(track_id) DO UPDATE SET
                title = excluded.title,
                artist = excluded.artist,
                duration_seconds = excluded.duration_seconds,
                category = excluded.category,
                source_kind = excluded.source_kind,
                source_value = excluded.source_value
            """,  # noqa: S608
            (
                track.id.value,
                track.title,
                track.artist,
                track.duration_seconds,
                track.category,
                source.kind,
                source_value,
            ),
        )
        logger.debug(LogTemplates.CATALOG_TRACK_UPSERTED, track.id.value)

    def _row_to_track(self, row: dict[str, Any]) -> Track:
        source: LocalFileSource | StreamSource
        if row["source_kind"] == "local":
            source = LocalFileSource(relative_path=row["source_value"])
        else:
            source = StreamSource(url=row["source_value"])

        return Track(
            id=TrackId(row["track_id"]),
            title=row["title"],
            artist=row["artist"],
            duration_seconds=row["duration_seconds"],
            category=row["category"],
            audio_source=source,
        )
