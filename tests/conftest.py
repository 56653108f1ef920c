from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from phantom_radio.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def track_catalog(in_memory_database):
    """Create a track catalog backed by the in-memory database."""
    from phantom_radio.infrastructure.persistence.repositories.track_repository import (
        SQLiteTrackCatalog,
    )

    return SQLiteTrackCatalog(in_memory_database)


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for catalog tracks with a local audio source."""
    from phantom_radio.domain.music.entities import Track
    from phantom_radio.domain.music.value_objects import LocalFileSource, TrackId

    def _make(track_id: str = "pbz-battle-004", title: str | None = None, **kwargs):
        return Track(
            id=TrackId(track_id),
            title=title or f"Track {track_id}",
            audio_source=kwargs.pop(
                "audio_source", LocalFileSource(relative_path=f"{track_id}.mp3")
            ),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_entry(make_track):
    """Factory for queue entries."""
    from phantom_radio.domain.music.entities import QueueEntry

    def _make(
        track_id: str = "pbz-battle-004",
        requested_by: int | None = 111,
        *,
        pinned: bool = False,
    ):
        return QueueEntry(
            track=make_track(track_id),
            requested_by=requested_by,
            requested_by_name=f"user-{requested_by}" if requested_by else None,
            is_pinned=pinned,
        )

    return _make


@pytest.fixture
def sample_track(make_track):
    return make_track("pbz-ambient-001", title="Ghost Lights", artist="Phantom Zone", duration_seconds=185)


# ============================================================================
# Port Fixtures
# ============================================================================


@pytest.fixture
def voice_adapter():
    """Voice adapter double that connects and plays successfully."""
    adapter = MagicMock()
    adapter.connect = AsyncMock(return_value=True)
    adapter.disconnect = AsyncMock(return_value=True)
    adapter.play = AsyncMock(return_value=True)
    adapter.stop = AsyncMock(return_value=True)
    adapter.pause = AsyncMock(return_value=True)
    adapter.resume = AsyncMock(return_value=True)
    adapter.is_connected = MagicMock(return_value=True)
    return adapter


@pytest.fixture
def catalog():
    """Catalog double whose lookups are configured per test."""
    mock = MagicMock()
    mock.get_by_id = AsyncMock(return_value=None)
    mock.search = AsyncMock(return_value=[])
    mock.list_by_category = AsyncMock(return_value=[])
    mock.increment_play_count = AsyncMock()
    return mock


@pytest.fixture
def event_bus():
    """A fresh event bus isolated from the global singleton."""
    from phantom_radio.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture(autouse=True)
def _reset_globals():
    """Reset the global event bus and settings cache between tests."""
    from phantom_radio.config.settings import clear_settings_cache
    from phantom_radio.domain.shared.events import reset_event_bus

    yield
    reset_event_bus()
    clear_settings_cache()
