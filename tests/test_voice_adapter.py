"""
Unit Tests for DiscordVoiceAdapter

Tests for:
- Connecting, moving and connect failures
- Play tokens that keep stale after-callbacks away from the coordinator
- Transport error reporting from the player thread
- Pause / resume / stop on the voice client
"""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from phantom_radio.application.interfaces.audio_resolver import ResolvedAudio
from phantom_radio.domain.music.value_objects import LocalFileSource
from phantom_radio.domain.shared.exceptions import (
    AudioSourceUnresolvableError,
    VoiceTransportError,
)
from phantom_radio.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

GUILD_ID = 123
CHANNEL_ID = 456
SOURCE = LocalFileSource(relative_path="pbz-battle-004.mp3")


@pytest.fixture
def channel():
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = CHANNEL_ID
    channel.name = "radio"
    channel.connect = AsyncMock()
    return channel


@pytest.fixture
def guild(channel):
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Phantom Zone"
    guild.voice_client = None
    guild.get_channel.return_value = channel
    guild.change_voice_state = AsyncMock()
    return guild


@pytest.fixture
def mock_bot(guild):
    bot = MagicMock()
    bot.get_guild.return_value = guild
    return bot


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=ResolvedAudio(input="/music/pbz-battle-004.mp3"))
    return resolver


@pytest.fixture
def adapter(mock_bot, resolver):
    return DiscordVoiceAdapter(mock_bot, resolver)


@pytest.fixture
def voice_client(guild):
    vc = MagicMock(spec=discord.VoiceClient)
    vc.is_connected.return_value = True
    vc.is_playing.return_value = False
    vc.is_paused.return_value = False
    vc.channel = MagicMock()
    vc.channel.id = CHANNEL_ID
    vc.disconnect = AsyncMock()
    vc.move_to = AsyncMock()
    guild.voice_client = vc
    return vc


class TestConnect:
    @pytest.mark.asyncio
    async def test_connects_self_deafened(self, adapter, channel, guild):
        """Should join the channel deafened."""
        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is True

        channel.connect.assert_awaited_once_with(self_deaf=True)
        guild.change_voice_state.assert_awaited_once_with(channel=channel, self_deaf=True)

    @pytest.mark.asyncio
    async def test_unknown_guild(self, adapter, mock_bot):
        mock_bot.get_guild.return_value = None

        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is False

    @pytest.mark.asyncio
    async def test_non_voice_channel(self, adapter, guild):
        guild.get_channel.return_value = MagicMock(spec=discord.TextChannel)

        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is False

    @pytest.mark.asyncio
    async def test_already_in_channel(self, adapter, channel, voice_client):
        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is True
        channel.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_moves_between_channels(self, adapter, channel, voice_client):
        voice_client.channel.id = 999

        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is True
        voice_client.move_to.assert_awaited_once_with(channel)

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self, adapter, channel):
        """Should report a connect timeout as a transient transport error."""
        channel.connect.side_effect = TimeoutError()

        with pytest.raises(VoiceTransportError) as exc_info:
            await adapter.connect(GUILD_ID, CHANNEL_ID)

        assert exc_info.value.transient is True

    @pytest.mark.asyncio
    async def test_client_exception_returns_false(self, adapter, channel):
        channel.connect.side_effect = discord.ClientException("Already connected")

        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is False

    @pytest.mark.asyncio
    async def test_stale_client_cleaned_up(self, adapter, channel, voice_client):
        voice_client.is_connected.return_value = False

        assert await adapter.connect(GUILD_ID, CHANNEL_ID) is True

        voice_client.disconnect.assert_awaited_once_with(force=True)
        channel.connect.assert_awaited_once()


class TestPlay:
    @pytest.mark.asyncio
    async def test_play_not_connected(self, adapter, resolver):
        assert await adapter.play(GUILD_ID, SOURCE) is False
        resolver.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_play_starts_ffmpeg(self, adapter, voice_client):
        """Should resolve the source and hand FFmpeg output to the voice client."""
        with patch("discord.FFmpegPCMAudio") as ffmpeg, patch(
            "discord.PCMVolumeTransformer"
        ) as transformer:
            assert await adapter.play(GUILD_ID, SOURCE) is True

        ffmpeg.assert_called_once_with(
            "/music/pbz-battle-004.mp3", before_options=None, options=None
        )
        transformer.assert_called_once_with(ffmpeg.return_value, volume=0.5)
        voice_client.play.assert_called_once()

    @pytest.mark.asyncio
    async def test_unresolvable_propagates(self, adapter, resolver, voice_client):
        resolver.resolve.side_effect = AudioSourceUnresolvableError("local:x", "gone")

        with pytest.raises(AudioSourceUnresolvableError):
            await adapter.play(GUILD_ID, SOURCE)

        voice_client.play.assert_not_called()

    @pytest.mark.asyncio
    async def test_replacing_audio_stops_current(self, adapter, voice_client):
        voice_client.is_playing.return_value = True

        with patch("discord.FFmpegPCMAudio"), patch("discord.PCMVolumeTransformer"):
            await adapter.play(GUILD_ID, SOURCE)

        voice_client.stop.assert_called_once()


class TestPlayFinished:
    @pytest.mark.asyncio
    async def test_current_token_reports_track_end(self, adapter):
        on_end = AsyncMock()
        adapter.set_on_track_end_callback(on_end)
        adapter._active_play[GUILD_ID] = 7

        await adapter._handle_play_finished(GUILD_ID, 7, None)

        on_end.assert_awaited_once_with(GUILD_ID)
        assert GUILD_ID not in adapter._active_play

    @pytest.mark.asyncio
    async def test_stale_token_ignored(self, adapter):
        """Should drop callbacks from audio replaced by a newer play."""
        on_end = AsyncMock()
        adapter.set_on_track_end_callback(on_end)
        adapter._active_play[GUILD_ID] = 8

        await adapter._handle_play_finished(GUILD_ID, 7, None)

        on_end.assert_not_awaited()
        assert adapter._active_play[GUILD_ID] == 8

    @pytest.mark.asyncio
    async def test_callback_after_disconnect_ignored(self, adapter):
        on_end = AsyncMock()
        adapter.set_on_track_end_callback(on_end)
        adapter._active_play[GUILD_ID] = 7

        await adapter.disconnect(GUILD_ID)
        await adapter._handle_play_finished(GUILD_ID, 7, None)

        on_end.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_player_error_reported_as_transport_error(self, adapter):
        on_end = AsyncMock()
        on_error = AsyncMock()
        adapter.set_on_track_end_callback(on_end)
        adapter.set_on_transport_error_callback(on_error)
        adapter._active_play[GUILD_ID] = 3
        error = OSError("pipe closed")

        await adapter._handle_play_finished(GUILD_ID, 3, error)

        on_error.assert_awaited_once_with(GUILD_ID, error)
        on_end.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_callback_exception_logged(self, adapter, caplog):
        adapter.set_on_track_end_callback(AsyncMock(side_effect=RuntimeError("boom")))
        adapter._active_play[GUILD_ID] = 1

        await adapter._handle_play_finished(GUILD_ID, 1, None)

        assert "boom" in caplog.text


class TestControls:
    @pytest.mark.asyncio
    async def test_pause_and_resume(self, adapter, voice_client):
        voice_client.is_playing.return_value = True
        assert await adapter.pause(GUILD_ID) is True
        voice_client.pause.assert_called_once()

        voice_client.is_playing.return_value = False
        voice_client.is_paused.return_value = True
        assert await adapter.resume(GUILD_ID) is True
        voice_client.resume.assert_called_once()

    @pytest.mark.asyncio
    async def test_pause_without_client(self, adapter):
        assert await adapter.pause(GUILD_ID) is False

    @pytest.mark.asyncio
    async def test_stop_keeps_token(self, adapter, voice_client):
        """Should leave the play token so the stop still reports a track end."""
        voice_client.is_playing.return_value = True
        adapter._active_play[GUILD_ID] = 4

        assert await adapter.stop(GUILD_ID) is True

        voice_client.stop.assert_called_once()
        assert adapter._active_play[GUILD_ID] == 4

    @pytest.mark.asyncio
    async def test_disconnect_failure_raises(self, adapter, voice_client):
        voice_client.disconnect.side_effect = discord.ClientException("nope")

        with pytest.raises(VoiceTransportError):
            await adapter.disconnect(GUILD_ID)

    def test_is_connected(self, adapter, voice_client):
        assert adapter.is_connected(GUILD_ID) is True
        voice_client.is_connected.return_value = False
        assert adapter.is_connected(GUILD_ID) is False
