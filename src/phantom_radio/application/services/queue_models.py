"""Read models exposed by the playback coordinator."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import QueueEntry
from ...domain.music.value_objects import EnqueueOutcome, PlaybackState
from ...domain.shared.types import NonNegativeInt


class QueueSnapshot(BaseModel):
    """Point-in-time view of one guild's queue for now-playing and queue displays."""

    model_config = ConfigDict(frozen=True)

    guild_id: NonNegativeInt
    state: PlaybackState = PlaybackState.DISCONNECTED
    current: QueueEntry | None = None
    upcoming: list[QueueEntry] = []
    loop_enabled: bool = False
    skip_votes: NonNegativeInt = 0
    skip_votes_required: NonNegativeInt = 0

    @property
    def total_length(self) -> int:
        return len(self.upcoming)

    @property
    def is_empty(self) -> bool:
        return self.current is None and not self.upcoming

    @property
    def total_duration_seconds(self) -> int:
        entries = self.upcoming if self.current is None else [self.current, *self.upcoming]
        return sum(entry.track.duration_seconds for entry in entries)

    @classmethod
    def empty(cls, guild_id: int) -> QueueSnapshot:
        return cls(guild_id=guild_id)


class BatchEnqueueResult(BaseModel):
    """Per-entry outcomes of queueing a whole playlist, in queueing order."""

    model_config = ConfigDict(frozen=True)

    outcomes: list[tuple[QueueEntry, EnqueueOutcome]] = []

    @property
    def accepted(self) -> list[QueueEntry]:
        return [entry for entry, outcome in self.outcomes if outcome.is_accepted]

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.outcomes) - self.accepted_count
