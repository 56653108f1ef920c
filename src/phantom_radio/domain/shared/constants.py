"""Centralized constants for the database schema and SQLite configuration."""

from __future__ import annotations


class DatabaseTables:
    """Database table names."""

    TRACKS = "tracks"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class AudioConstants:
    """Audio source constants shared by the resolver and voice adapter."""

    # Keeps stream URLs alive across short network hiccups.
    FFMPEG_BEFORE_OPTIONS = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS = "-vn"
    YTDLP_FORMAT = "bestaudio/best"


class CatalogConstants:
    """Catalog lookups shared by the playlist command and the catalog adapter."""

    ALL_CATEGORIES = "all"
