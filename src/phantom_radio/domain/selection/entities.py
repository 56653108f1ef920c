"""Core domain entities for the song selection rotation."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from phantom_radio.domain.selection.value_objects import JoinResult, LeaveResult, SelectionCheck
from phantom_radio.domain.shared.datetime_utils import utcnow
from phantom_radio.domain.shared.messages import SelectionMessages
from phantom_radio.domain.shared.types import DiscordSnowflake, NonEmptyStr, UtcDatetimeField


class SelectorEntry(BaseModel):
    """A user taking part in the rotation."""

    model_config = ConfigDict(frozen=True, strict=True)

    user_id: DiscordSnowflake
    display_name: NonEmptyStr
    joined_at: UtcDatetimeField = Field(default_factory=utcnow)


class SelectionRotation(BaseModel):
    """Turn-based rotation deciding who may pick the next song.

    At most one user is the current selector and that user is never also in
    the waiting line. An empty selector implies an empty line. Every change
    of hands bumps ``generation`` so a timer armed for an earlier turn can
    tell that it is stale.
    """

    model_config = ConfigDict(strict=True)

    turn_duration: timedelta = timedelta(minutes=2)
    current_selector: SelectorEntry | None = None
    turn_started_at: UtcDatetimeField | None = None
    waiting_line: list[SelectorEntry] = Field(default_factory=list)
    generation: int = 0

    @property
    def turn_deadline(self) -> datetime | None:
        if self.turn_started_at is None:
            return None
        return self.turn_started_at + self.turn_duration

    @property
    def is_empty(self) -> bool:
        return self.current_selector is None and not self.waiting_line

    @property
    def turn_minutes(self) -> int:
        return max(1, int(self.turn_duration.total_seconds()) // 60)

    def remaining(self, now: datetime | None = None) -> timedelta | None:
        """Time left in the active turn, never negative."""
        deadline = self.turn_deadline
        if deadline is None:
            return None
        return max(timedelta(0), deadline - (now or utcnow()))

    def is_selector(self, user_id: int) -> bool:
        return self.current_selector is not None and self.current_selector.user_id == user_id

    def position_of(self, user_id: int) -> int | None:
        """0 for the selector, 1-based line position for waiting users."""
        if self.is_selector(user_id):
            return 0
        for index, entry in enumerate(self.waiting_line, start=1):
            if entry.user_id == user_id:
                return index
        return None

    def check(self, user_id: int) -> SelectionCheck:
        if self.is_selector(user_id):
            return SelectionCheck(allowed=True, position=0)

        position = self.position_of(user_id)
        if self.current_selector is None or position is None:
            return SelectionCheck(allowed=False, reason=SelectionMessages.NOT_IN_LINE)

        return SelectionCheck(
            allowed=False,
            position=position,
            reason=SelectionMessages.NOT_YOUR_TURN.format(position=position),
        )

    def join(self, user_id: int, display_name: str, now: datetime | None = None) -> JoinResult:
        if self.is_selector(user_id):
            return JoinResult(
                accepted=False, position=0, message=SelectionMessages.ALREADY_SELECTING
            )

        position = self.position_of(user_id)
        if position is not None:
            return JoinResult(
                accepted=False,
                position=position,
                message=SelectionMessages.ALREADY_IN_LINE.format(position=position),
            )

        entry = SelectorEntry(user_id=user_id, display_name=display_name, joined_at=now or utcnow())

        if self.current_selector is None:
            self._start_turn(entry, now)
            return JoinResult(
                accepted=True,
                position=0,
                message=SelectionMessages.YOUR_TURN.format(minutes=self.turn_minutes),
                started_turn=True,
            )

        self.waiting_line.append(entry)
        position = len(self.waiting_line)
        return JoinResult(
            accepted=True,
            position=position,
            message=SelectionMessages.JOINED_LINE.format(position=position),
        )

    def leave(self, user_id: int, now: datetime | None = None) -> LeaveResult:
        """Leave the rotation. A selector leaving hands the turn on."""
        if self.is_selector(user_id):
            self.advance(now)
            return LeaveResult(accepted=True, message=SelectionMessages.LEFT_LINE, advanced=True)

        for index, entry in enumerate(self.waiting_line):
            if entry.user_id == user_id:
                del self.waiting_line[index]
                return LeaveResult(accepted=True, message=SelectionMessages.LEFT_LINE)

        return LeaveResult(accepted=False, message=SelectionMessages.NOT_IN_ROTATION)

    def finish_turn(self, user_id: int, now: datetime | None = None) -> LeaveResult:
        """Selector passes without picking a song."""
        if not self.is_selector(user_id):
            return LeaveResult(accepted=False, message=SelectionMessages.NOT_SELECTOR)

        self.advance(now)
        return LeaveResult(accepted=True, message=SelectionMessages.TURN_PASSED, advanced=True)

    def song_selected(self, user_id: int, now: datetime | None = None) -> bool:
        """One song per turn: a successful pick ends the selector's turn."""
        if not self.is_selector(user_id):
            return False
        self.advance(now)
        return True

    def expire_turn(self, generation: int, now: datetime | None = None) -> bool:
        """Timer expiry for the turn armed at ``generation``; stale timers do nothing."""
        if generation != self.generation or self.current_selector is None:
            return False
        self.advance(now)
        return True

    def advance(self, now: datetime | None = None) -> SelectorEntry | None:
        """Hand the turn to the front of the line, or clear it when nobody waits."""
        if self.waiting_line:
            self._start_turn(self.waiting_line.pop(0), now)
        else:
            self.current_selector = None
            self.turn_started_at = None
            self.generation += 1
        return self.current_selector

    def _start_turn(self, entry: SelectorEntry, now: datetime | None) -> None:
        self.current_selector = entry
        self.turn_started_at = now or utcnow()
        self.generation += 1
