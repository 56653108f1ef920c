"""Guild Session Registry - one playback coordinator per guild."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.music.entities import QueueLimits
from ...domain.shared.events import EventBus, SessionCreated, SessionDestroyed, get_event_bus
from ...domain.shared.exceptions import TransportConnectFailedError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake
from .playback_coordinator import PlaybackCoordinator

if TYPE_CHECKING:
    from ...domain.music.repository import TrackCatalog
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)

CoordinatorFactory = Callable[[DiscordSnowflake], PlaybackCoordinator]


class GuildSessionRegistry:
    """Sole owner of the guild -> coordinator map.

    Lookup and insertion happen without an await in between, so two
    concurrent requests for the same guild always share a coordinator.
    The registry also owns the voice adapter callbacks and routes them
    to the coordinator of the guild they concern.
    """

    def __init__(
        self,
        *,
        voice_adapter: VoiceAdapter,
        catalog: TrackCatalog | None = None,
        limits: QueueLimits | None = None,
        event_bus: EventBus | None = None,
        coordinator_factory: CoordinatorFactory | None = None,
    ) -> None:
        self._voice_adapter = voice_adapter
        self._catalog = catalog
        self._limits = limits or QueueLimits()
        self._event_bus = event_bus or get_event_bus()
        self._factory = coordinator_factory or self._build_coordinator
        self._coordinators: dict[DiscordSnowflake, PlaybackCoordinator] = {}

        self._voice_adapter.set_on_track_end_callback(self._on_track_end)
        self._voice_adapter.set_on_transport_error_callback(self.notify_transport_error)

    def _build_coordinator(self, guild_id: DiscordSnowflake) -> PlaybackCoordinator:
        return PlaybackCoordinator(
            guild_id=guild_id,
            voice_adapter=self._voice_adapter,
            catalog=self._catalog,
            limits=self._limits,
            event_bus=self._event_bus,
        )

    def __len__(self) -> int:
        return len(self._coordinators)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._coordinators

    def get(self, guild_id: DiscordSnowflake) -> PlaybackCoordinator | None:
        return self._coordinators.get(guild_id)

    def guild_ids(self) -> list[DiscordSnowflake]:
        return list(self._coordinators)

    def coordinators(self) -> list[PlaybackCoordinator]:
        return list(self._coordinators.values())

    async def get_or_create(
        self, guild_id: DiscordSnowflake, channel_id: ChannelIdField
    ) -> PlaybackCoordinator:
        """Return the guild's coordinator, connecting it when needed.

        A coordinator created here is only kept, and only announced, once its
        first connection succeeds.

        Raises:
            TransportConnectFailedError: The coordinator could not join voice.
        """
        coordinator = self._coordinators.get(guild_id)
        created = coordinator is None
        if coordinator is None:
            coordinator = self._factory(guild_id)
            self._coordinators[guild_id] = coordinator

        if not coordinator.is_connected and not await coordinator.connect(channel_id):
            if created and self._coordinators.get(guild_id) is coordinator:
                del self._coordinators[guild_id]
                logger.info(LogTemplates.SESSION_DISCARDED, guild_id)
            raise TransportConnectFailedError(guild_id)

        if created:
            logger.info(LogTemplates.SESSION_CREATED, guild_id)
            await self._event_bus.publish(SessionCreated(guild_id=guild_id, channel_id=channel_id))
        return coordinator

    async def destroy(self, guild_id: DiscordSnowflake, reason: str = "requested") -> bool:
        """Disconnect and forget a guild's coordinator."""
        coordinator = self._coordinators.pop(guild_id, None)
        if coordinator is None:
            logger.debug(LogTemplates.SESSION_NOT_FOUND, guild_id)
            return False

        await coordinator.disconnect()
        logger.info(LogTemplates.SESSION_DESTROYED, guild_id, reason)
        await self._event_bus.publish(SessionDestroyed(guild_id=guild_id, reason=reason))
        return True

    async def shutdown(self) -> int:
        count = 0
        for guild_id in self.guild_ids():
            if await self.destroy(guild_id, reason="shutdown"):
                count += 1
        logger.info(LogTemplates.SESSION_SHUTDOWN, count)
        return count

    async def _on_track_end(self, guild_id: DiscordSnowflake) -> None:
        coordinator = self._coordinators.get(guild_id)
        if coordinator is None:
            logger.debug(LogTemplates.SESSION_CALLBACK_UNKNOWN_GUILD, guild_id)
            return
        await coordinator.handle_track_ended()

    async def notify_transport_error(self, guild_id: DiscordSnowflake, error: Exception) -> None:
        """Route a transport failure to the guild's coordinator for recovery."""
        coordinator = self._coordinators.get(guild_id)
        if coordinator is None:
            logger.debug(LogTemplates.SESSION_CALLBACK_UNKNOWN_GUILD, guild_id)
            return
        await coordinator.handle_transport_error(error)
