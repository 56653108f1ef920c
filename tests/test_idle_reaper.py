"""
Unit Tests for IdleReaper

Tests for:
- Sweeping idle sessions at and beyond the threshold
- Never reaping a session that has a current entry
- Start / stop lifecycle
"""

from datetime import timedelta

import pytest

from phantom_radio.application.services.idle_reaper import IdleReaper
from phantom_radio.application.services.session_registry import GuildSessionRegistry
from phantom_radio.config.settings import IdleSettings

CHANNEL_ID = 3003


@pytest.fixture
def registry(voice_adapter, event_bus):
    return GuildSessionRegistry(voice_adapter=voice_adapter, event_bus=event_bus)


@pytest.fixture
def reaper(registry):
    return IdleReaper(registry=registry, settings=IdleSettings())


class TestSweep:
    @pytest.mark.asyncio
    async def test_session_idle_exactly_threshold_reaped(self, registry, reaper):
        """Should reap a session idle for exactly the threshold."""
        coordinator = await registry.get_or_create(1, CHANNEL_ID)
        now = coordinator.last_activity + timedelta(minutes=20)

        assert await reaper.run_sweep(now) == 1
        assert 1 not in registry

    @pytest.mark.asyncio
    async def test_recent_session_kept(self, registry, reaper):
        coordinator = await registry.get_or_create(1, CHANNEL_ID)
        now = coordinator.last_activity + timedelta(minutes=19, seconds=59)

        assert await reaper.run_sweep(now) == 0
        assert 1 in registry

    @pytest.mark.asyncio
    async def test_playing_session_never_reaped(self, registry, reaper, make_entry):
        """Should leave a session with a current entry alone however old."""
        coordinator = await registry.get_or_create(1, CHANNEL_ID)
        await coordinator.add_to_queue(make_entry("long-mix"))
        now = coordinator.last_activity + timedelta(hours=6)

        assert await reaper.run_sweep(now) == 0
        assert 1 in registry

    @pytest.mark.asyncio
    async def test_only_idle_guilds_reaped(self, registry, reaper, make_entry):
        idle = await registry.get_or_create(1, CHANNEL_ID)
        busy = await registry.get_or_create(2, CHANNEL_ID)
        await busy.add_to_queue(make_entry("a"))
        now = idle.last_activity + timedelta(hours=1)

        assert await reaper.run_sweep(now) == 1
        assert registry.guild_ids() == [2]

    def test_threshold_follows_settings(self, registry):
        reaper = IdleReaper(
            registry=registry, settings=IdleSettings(idle_disconnect_minutes=3)
        )
        assert reaper.idle_threshold == timedelta(minutes=3)


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, reaper):
        reaper.start()
        assert reaper.is_running

        await reaper.stop()

        assert not reaper.is_running

    @pytest.mark.asyncio
    async def test_double_start_ignored(self, reaper):
        reaper.start()
        task = reaper._task
        reaper.start()

        assert reaper._task is task
        await reaper.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, reaper):
        await reaper.stop()
        assert not reaper.is_running
