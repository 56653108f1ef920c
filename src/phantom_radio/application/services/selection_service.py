"""Selection Turn Coordinator - drives the song selection rotation with per-turn timers."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from ...domain.selection.entities import SelectionRotation, SelectorEntry
from ...domain.selection.value_objects import JoinResult, LeaveResult, SelectionCheck
from ...domain.shared.events import (
    EventBus,
    SelectionTurnExpired,
    SelectionTurnStarted,
    get_event_bus,
)
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class SelectionStatus(BaseModel):
    """Who is selecting, who is waiting, and how long the turn has left."""

    model_config = ConfigDict(frozen=True)

    selector: SelectorEntry | None = None
    waiting: list[SelectorEntry] = []
    remaining_seconds: int | None = None

    @property
    def line_length(self) -> int:
        return len(self.waiting)


class SelectionTurnCoordinator:
    """Process-wide rotation deciding who may pick the next song.

    Each turn arms one timer tagged with the rotation generation it was
    started for. Song selection, leaving and timer expiry compete to end
    the turn; whichever runs first advances it and the others find the
    generation moved on and do nothing.
    """

    def __init__(
        self,
        *,
        turn_duration: timedelta = timedelta(minutes=2),
        event_bus: EventBus | None = None,
    ) -> None:
        self._rotation = SelectionRotation(turn_duration=turn_duration)
        self._event_bus = event_bus or get_event_bus()
        self._timer: asyncio.Task[None] | None = None

    @property
    def rotation(self) -> SelectionRotation:
        return self._rotation

    def can_select(self, user_id: int) -> SelectionCheck:
        return self._rotation.check(user_id)

    def status(self, now: datetime | None = None) -> SelectionStatus:
        remaining = self._rotation.remaining(now)
        return SelectionStatus(
            selector=self._rotation.current_selector,
            waiting=list(self._rotation.waiting_line),
            remaining_seconds=int(remaining.total_seconds()) if remaining is not None else None,
        )

    async def join_queue(self, user_id: int, display_name: str) -> JoinResult:
        result = self._rotation.join(user_id, display_name)
        if result.accepted:
            logger.info(LogTemplates.SELECTION_JOINED, user_id, result.position)
        if result.started_turn:
            await self._begin_turn()
        return result

    async def leave_queue(self, user_id: int) -> LeaveResult:
        result = self._rotation.leave(user_id)
        if result.accepted:
            logger.info(LogTemplates.SELECTION_LEFT, user_id)
        if result.advanced:
            await self._begin_turn()
        return result

    async def finish_turn(self, user_id: int) -> LeaveResult:
        result = self._rotation.finish_turn(user_id)
        if result.advanced:
            logger.info(LogTemplates.SELECTION_TURN_FINISHED, user_id)
            await self._begin_turn()
        return result

    async def on_song_selected(self, user_id: int) -> bool:
        if not self._rotation.song_selected(user_id):
            return False
        logger.info(LogTemplates.SELECTION_TURN_FINISHED, user_id)
        await self._begin_turn()
        return True

    async def stop(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            try:
                await timer
            except asyncio.CancelledError:
                pass
        logger.info(LogTemplates.SELECTION_STOPPED)

    async def expire_turn(self, generation: int) -> bool:
        """End the turn armed at ``generation`` unless it already ended."""
        expiring = self._rotation.current_selector
        if not self._rotation.expire_turn(generation):
            logger.debug(
                LogTemplates.SELECTION_STALE_TIMER, generation, self._rotation.generation
            )
            return False

        if expiring is not None:
            logger.info(LogTemplates.SELECTION_TURN_EXPIRED, expiring.user_id)
            await self._event_bus.publish(SelectionTurnExpired(user_id=expiring.user_id))

        await self._begin_turn()
        return True

    async def _begin_turn(self) -> None:
        """Arm the timer for whoever now holds the turn."""
        self._cancel_timer()

        selector = self._rotation.current_selector
        if selector is None:
            logger.debug(LogTemplates.SELECTION_EMPTY)
            return

        generation = self._rotation.generation
        seconds = self._rotation.turn_duration.total_seconds()
        self._timer = asyncio.create_task(self._run_timer(generation, seconds))

        logger.info(LogTemplates.SELECTION_TURN_STARTED, selector.user_id, int(seconds))
        await self._event_bus.publish(
            SelectionTurnStarted(
                user_id=selector.user_id,
                display_name=selector.display_name,
                turn_seconds=int(seconds),
            )
        )

    async def _run_timer(self, generation: int, seconds: float) -> None:
        await asyncio.sleep(seconds)
        # Detach first so _begin_turn does not cancel the task running it.
        if self._timer is asyncio.current_task():
            self._timer = None
        await self.expire_turn(generation)

    def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
