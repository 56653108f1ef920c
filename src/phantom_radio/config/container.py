"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for adapters, coordinators, and handlers.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.play_playlist import PlayPlaylistHandler
    from ..application.commands.remove_track import RemoveTrackHandler
    from ..application.commands.request_track import RequestTrackHandler
    from ..application.commands.stop_playback import StopPlaybackHandler
    from ..application.commands.vote_skip import VoteSkipHandler
    from ..application.interfaces.audio_resolver import AudioSourceResolver
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.services.idle_reaper import IdleReaper
    from ..application.services.selection_service import SelectionTurnCoordinator
    from ..application.services.session_registry import GuildSessionRegistry
    from ..domain.shared.events import EventBus
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.persistence.repositories.track_repository import SQLiteTrackCatalog
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _track_catalog: SQLiteTrackCatalog | None = None

    # Infrastructure adapters
    _audio_resolver: AudioSourceResolver | None = None
    _voice_adapter: VoiceAdapter | None = None

    # Application services
    _event_bus: EventBus | None = None
    _session_registry: GuildSessionRegistry | None = None
    _selection: SelectionTurnCoordinator | None = None

    # Command handlers
    _request_track_handler: RequestTrackHandler | None = None
    _play_playlist_handler: PlayPlaylistHandler | None = None
    _vote_skip_handler: VoteSkipHandler | None = None
    _stop_playback_handler: StopPlaybackHandler | None = None
    _remove_track_handler: RemoveTrackHandler | None = None

    # Query handlers
    _get_queue_handler: GetQueueHandler | None = None

    # Background jobs
    _idle_reaper: IdleReaper | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Persistence ===

    @property
    def database(self) -> Database:
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def track_catalog(self) -> SQLiteTrackCatalog:
        if self._track_catalog is None:
            from ..infrastructure.persistence.repositories.track_repository import (
                SQLiteTrackCatalog,
            )

            self._track_catalog = SQLiteTrackCatalog(self.database)
        return self._track_catalog

    # === Infrastructure Adapters ===

    @property
    def audio_resolver(self) -> AudioSourceResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.source_resolver import YtDlpSourceResolver

            self._audio_resolver = YtDlpSourceResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(
                self.bot, self.audio_resolver, self.settings.audio
            )
        return self._voice_adapter

    # === Application Services ===

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import get_event_bus

            self._event_bus = get_event_bus()
        return self._event_bus

    @property
    def session_registry(self) -> GuildSessionRegistry:
        """Get the per-guild playback session registry."""
        if self._session_registry is None:
            from ..application.services.session_registry import GuildSessionRegistry

            self._session_registry = GuildSessionRegistry(
                voice_adapter=self.voice_adapter,
                catalog=self.track_catalog,
                limits=self.settings.queue.to_limits(),
                event_bus=self.event_bus,
            )
        return self._session_registry

    @property
    def selection(self) -> SelectionTurnCoordinator:
        """Get the process-wide song selection rotation."""
        if self._selection is None:
            from ..application.services.selection_service import SelectionTurnCoordinator

            self._selection = SelectionTurnCoordinator(
                turn_duration=self.settings.selection.turn_duration,
                event_bus=self.event_bus,
            )
        return self._selection

    # === Command Handlers ===

    @property
    def request_track_handler(self) -> RequestTrackHandler:
        if self._request_track_handler is None:
            from ..application.commands.request_track import RequestTrackHandler

            self._request_track_handler = RequestTrackHandler(
                registry=self.session_registry,
                catalog=self.track_catalog,
                selection=self.selection,
                limits=self.settings.queue.to_limits(),
            )
        return self._request_track_handler

    @property
    def play_playlist_handler(self) -> PlayPlaylistHandler:
        if self._play_playlist_handler is None:
            from ..application.commands.play_playlist import PlayPlaylistHandler

            self._play_playlist_handler = PlayPlaylistHandler(
                registry=self.session_registry, catalog=self.track_catalog
            )
        return self._play_playlist_handler

    @property
    def vote_skip_handler(self) -> VoteSkipHandler:
        if self._vote_skip_handler is None:
            from ..application.commands.vote_skip import VoteSkipHandler

            self._vote_skip_handler = VoteSkipHandler(registry=self.session_registry)
        return self._vote_skip_handler

    @property
    def stop_playback_handler(self) -> StopPlaybackHandler:
        if self._stop_playback_handler is None:
            from ..application.commands.stop_playback import StopPlaybackHandler

            self._stop_playback_handler = StopPlaybackHandler(registry=self.session_registry)
        return self._stop_playback_handler

    @property
    def remove_track_handler(self) -> RemoveTrackHandler:
        if self._remove_track_handler is None:
            from ..application.commands.remove_track import RemoveTrackHandler

            self._remove_track_handler = RemoveTrackHandler(registry=self.session_registry)
        return self._remove_track_handler

    # === Query Handlers ===

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(registry=self.session_registry)
        return self._get_queue_handler

    # === Background Jobs ===

    @property
    def idle_reaper(self) -> IdleReaper:
        if self._idle_reaper is None:
            from ..application.services.idle_reaper import IdleReaper

            self._idle_reaper = IdleReaper(
                registry=self.session_registry,
                settings=self.settings.idle,
            )
        return self._idle_reaper

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

    async def shutdown(self) -> None:
        """Stop background work, leave every voice channel and close the database."""
        if self._idle_reaper is not None:
            await self._idle_reaper.stop()

        if self._selection is not None:
            await self._selection.stop()

        if self._session_registry is not None:
            await self._session_registry.shutdown()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
