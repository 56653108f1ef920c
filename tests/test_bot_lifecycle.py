"""
Unit Tests for Bot Lifecycle

Tests for:
- RadioBot initialization (intents, prefix, container wiring)
- setup_hook initializing the container and starting the idle reaper
- Forced voice disconnects reported to the session registry
- close() shutting the container down
"""

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from phantom_radio.domain.shared.exceptions import VoiceTransportError
from phantom_radio.infrastructure.discord.bot import RadioBot, create_bot

BOT_USER_ID = 999
GUILD_ID = 42


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    settings.discord.owner_ids = ()
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock()
    container.idle_reaper.start = MagicMock()

    registry = MagicMock()
    registry.__contains__.return_value = True
    registry.notify_transport_error = AsyncMock()
    container.session_registry = registry
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return RadioBot(container=mock_container, settings=mock_settings)


def _voice_state(channel):
    state = MagicMock()
    state.channel = channel
    return state


def _member(member_id):
    member = MagicMock()
    member.id = member_id
    member.guild.id = GUILD_ID
    return member


class TestBotInitialization:
    @pytest.mark.asyncio
    async def test_intents(self, bot):
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True

    @pytest.mark.asyncio
    async def test_wires_container(self, bot, mock_container, mock_settings):
        """Should hand itself to the container and keep both references."""
        mock_container.set_bot.assert_called_once_with(bot)
        assert bot.container is mock_container
        assert bot.settings is mock_settings
        assert bot.help_command is None

    @pytest.mark.asyncio
    async def test_owner_ids_from_settings(self, mock_container, mock_settings):
        mock_settings.discord.owner_ids = (123456789012345678,)

        bot = RadioBot(container=mock_container, settings=mock_settings)

        assert bot.owner_ids == {123456789012345678}

    @pytest.mark.asyncio
    async def test_create_bot(self, mock_container, mock_settings):
        assert isinstance(create_bot(mock_container, mock_settings), RadioBot)


class TestSetupHook:
    @pytest.mark.asyncio
    async def test_initializes_container_and_starts_reaper(self, bot, mock_container):
        await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        mock_container.idle_reaper.start.assert_called_once()

    @pytest.mark.asyncio
    async def test_init_failure_propagates(self, bot, mock_container):
        """Should not start the reaper when the container fails to initialize."""
        mock_container.initialize.side_effect = RuntimeError("disk full")

        with pytest.raises(RuntimeError):
            await bot.setup_hook()

        mock_container.idle_reaper.start.assert_not_called()


class TestVoiceStateUpdate:
    @pytest.fixture(autouse=True)
    def _bot_user(self):
        user = MagicMock()
        user.id = BOT_USER_ID
        with patch.object(RadioBot, "user", new_callable=PropertyMock, return_value=user):
            yield

    @pytest.mark.asyncio
    async def test_forced_disconnect_reported(self, bot, mock_container):
        """Should report the bot being dropped from voice as a transport error."""
        await bot.on_voice_state_update(
            _member(BOT_USER_ID), _voice_state(MagicMock()), _voice_state(None)
        )

        registry = mock_container.session_registry
        registry.notify_transport_error.assert_awaited_once()
        guild_id, error = registry.notify_transport_error.await_args.args
        assert guild_id == GUILD_ID
        assert isinstance(error, VoiceTransportError)

    @pytest.mark.asyncio
    async def test_other_members_ignored(self, bot, mock_container):
        await bot.on_voice_state_update(_member(1), _voice_state(MagicMock()), _voice_state(None))

        mock_container.session_registry.notify_transport_error.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_channel_move_ignored(self, bot, mock_container):
        await bot.on_voice_state_update(
            _member(BOT_USER_ID), _voice_state(MagicMock()), _voice_state(MagicMock())
        )

        mock_container.session_registry.notify_transport_error.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_guild_without_session_ignored(self, bot, mock_container):
        mock_container.session_registry.__contains__.return_value = False

        await bot.on_voice_state_update(
            _member(BOT_USER_ID), _voice_state(MagicMock()), _voice_state(None)
        )

        mock_container.session_registry.notify_transport_error.assert_not_awaited()


class TestBotClose:
    @pytest.mark.asyncio
    async def test_close_shuts_down_container(self, bot, mock_container):
        with patch("discord.ext.commands.Bot.close", new_callable=AsyncMock) as super_close:
            await bot.close()

        mock_container.shutdown.assert_awaited_once()
        super_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_survives_shutdown_error(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("db gone")

        with patch("discord.ext.commands.Bot.close", new_callable=AsyncMock) as super_close:
            await bot.close()

        super_close.assert_awaited_once()
