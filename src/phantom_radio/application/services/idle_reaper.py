"""Periodic disconnect of guild sessions that have sat idle too long."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...config.settings import IdleSettings
    from .session_registry import GuildSessionRegistry

logger = logging.getLogger(__name__)


class IdleReaper:
    def __init__(self, *, registry: GuildSessionRegistry, settings: IdleSettings) -> None:
        self._registry = registry
        self._settings = settings
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def idle_threshold(self) -> timedelta:
        return timedelta(minutes=self._settings.idle_disconnect_minutes)

    def start(self) -> None:
        if self._running:
            logger.warning(LogTemplates.REAPER_ALREADY_RUNNING)
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            LogTemplates.REAPER_STARTED,
            self._settings.idle_disconnect_minutes,
            self._settings.sweep_interval_minutes,
        )

    async def stop(self) -> None:
        self._running = False

        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info(LogTemplates.REAPER_STOPPED)

    async def _run_loop(self) -> None:
        interval_seconds = self._settings.sweep_interval_minutes * 60

        while self._running:
            try:
                await self.run_sweep()
            except Exception as e:
                logger.exception(LogTemplates.REAPER_SWEEP_FAILED, e)

            try:
                await asyncio.sleep(interval_seconds)
            except asyncio.CancelledError:
                break

    async def run_sweep(self, now: datetime | None = None) -> int:
        """Destroy every session with nothing current and no recent activity.

        A coordinator with a current entry is never touched, however old.
        """
        now = now or utcnow()
        threshold = self.idle_threshold
        coordinators = self._registry.coordinators()
        logger.debug(LogTemplates.REAPER_SWEEP_RUNNING, len(coordinators))

        reaped = 0
        for coordinator in coordinators:
            if not coordinator.queue.is_idle_for(threshold, now):
                continue
            if await self._registry.destroy(coordinator.guild_id, reason="idle"):
                reaped += 1

        if reaped > 0:
            logger.info(LogTemplates.REAPER_SWEEP_COMPLETED, reaped)
        return reaped

    @property
    def is_running(self) -> bool:
        return self._running
