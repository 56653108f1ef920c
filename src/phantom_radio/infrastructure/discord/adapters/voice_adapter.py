"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import TYPE_CHECKING

import discord

from phantom_radio.application.interfaces.voice_adapter import (
    TrackEndCallback,
    TransportErrorCallback,
    VoiceAdapter,
)
from phantom_radio.config.settings import AudioSettings
from phantom_radio.domain.shared.exceptions import VoiceTransportError
from phantom_radio.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....application.interfaces.audio_resolver import AudioSourceResolver
    from ....domain.music.value_objects import AudioSource

logger = logging.getLogger(__name__)


class DiscordVoiceAdapter(VoiceAdapter):
    """One ``discord.VoiceClient`` per guild, driven only by that guild's coordinator.

    Every ``play`` call is tagged with a token. The FFmpeg after-callback only
    reaches the coordinator when its token is still the guild's latest, so
    audio replaced by a newer ``play`` or torn down by ``disconnect`` never
    reports a spurious track end.
    """

    def __init__(
        self,
        bot: discord.Client,
        resolver: AudioSourceResolver,
        settings: AudioSettings | None = None,
    ) -> None:
        self._bot = bot
        self._resolver = resolver
        self._settings = settings or AudioSettings()
        self._volume = self._settings.default_volume
        self._on_track_end: TrackEndCallback | None = None
        self._on_transport_error: TransportErrorCallback | None = None
        self._tokens = itertools.count(1)
        self._active_play: dict[int, int] = {}

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return False

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(ErrorMessages.VOICE_CHANNEL_NOT_FOUND.format(channel_id=channel_id))
            return False

        vc = self._get_voice_client(guild_id)
        if vc and not vc.is_connected():
            logger.warning(LogTemplates.VOICE_STALE_CLEANUP, guild_id)
            await self.disconnect(guild_id)
            vc = None

        timeout = self._settings.connect_timeout_s
        try:
            async with asyncio.timeout(timeout):
                if vc and vc.channel:
                    if vc.channel.id == channel_id:
                        return True
                    await vc.move_to(channel)
                    logger.info(LogTemplates.VOICE_MOVED, channel.name)
                else:
                    await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise VoiceTransportError(
                ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id), transient=True
            ) from e
        except discord.ConnectionClosed as e:
            raise VoiceTransportError(str(e), transient=True) from e
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

        await self._ensure_self_deaf(guild, channel)
        return True

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except discord.DiscordException as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    async def disconnect(self, guild_id: int) -> bool:
        self._active_play.pop(guild_id, None)
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        try:
            await vc.disconnect(force=True)
        except discord.ClientException as e:
            raise VoiceTransportError(str(e)) from e

        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
        return True

    async def play(self, guild_id: int, source: AudioSource) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return False

        # AudioSourceUnresolvableError propagates to the coordinator.
        resolved = await self._resolver.resolve(source)
        logger.debug(LogTemplates.AUDIO_SOURCE_RESOLVED, source.describe(), guild_id)

        token = next(self._tokens)
        self._active_play[guild_id] = token
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        try:
            audio = discord.FFmpegPCMAudio(
                resolved.input,
                before_options=resolved.before_options,
                options=resolved.options,
            )
            vc.play(
                discord.PCMVolumeTransformer(audio, volume=self._volume),
                after=self._make_after_callback(guild_id, token),
            )
        except discord.ClientException as e:
            self._active_play.pop(guild_id, None)
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

        return True

    def _make_after_callback(self, guild_id: int, token: int):
        def after_callback(error: Exception | None = None) -> None:
            # Runs on the FFmpeg player thread.
            asyncio.run_coroutine_threadsafe(
                self._handle_play_finished(guild_id, token, error),
                self._bot.loop,
            )

        return after_callback

    async def _handle_play_finished(
        self, guild_id: int, token: int, error: Exception | None
    ) -> None:
        if self._active_play.get(guild_id) != token:
            return
        del self._active_play[guild_id]

        try:
            if error is not None:
                logger.warning(LogTemplates.VOICE_PLAYER_ERROR, guild_id, error)
                if self._on_transport_error:
                    await self._on_transport_error(guild_id, error)
                return

            if self._on_track_end:
                await self._on_track_end(guild_id)
            else:
                logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK, guild_id)
        except Exception as e:
            logger.exception(LogTemplates.PLAYBACK_CALLBACK_ERROR, guild_id, e)

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return True

    async def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_playing():
            vc.pause()
            logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
            return True

        return False

    async def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_paused():
            vc.resume()
            logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
            return True

        return False

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._on_track_end = callback

    def set_on_transport_error_callback(self, callback: TransportErrorCallback) -> None:
        self._on_transport_error = callback
