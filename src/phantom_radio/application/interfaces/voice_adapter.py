"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from phantom_radio.domain.shared.types import ChannelIdField, DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioSource

TrackEndCallback = Callable[[DiscordSnowflake], Awaitable[None]]
TransportErrorCallback = Callable[[DiscordSnowflake, Exception], Awaitable[None]]


class VoiceAdapter(ABC):
    """Interface for the single voice connection each guild owns.

    Only a guild's playback coordinator may call these operations.
    """

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> bool:
        """Connect (or move) to a voice channel.

        Raises ``VoiceTransportError`` with ``transient=True`` for failures
        worth an immediate retry; returns False for permanent ones.
        """
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    async def play(self, guild_id: DiscordSnowflake, source: "AudioSource") -> bool:
        """Start streaming a source.

        Raises ``AudioSourceUnresolvableError`` when the source cannot be played.
        """
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Stop current playback. The track-end callback fires afterwards."""
        ...

    @abstractmethod
    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause current playback."""
        ...

    @abstractmethod
    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume paused playback."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        """Set callback for when a track ends, naturally or after ``stop``."""
        ...

    @abstractmethod
    def set_on_transport_error_callback(self, callback: TransportErrorCallback) -> None:
        """Set callback for errors on an established connection."""
        ...
