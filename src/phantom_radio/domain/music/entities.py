"""Core domain entities for the music bounded context."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from phantom_radio.domain.music.value_objects import (
    AudioSource,
    EnqueueOutcome,
    QueueLane,
    SkipVoteTally,
    TrackIdField,
)
from phantom_radio.domain.shared.datetime_utils import format_duration, utcnow
from phantom_radio.domain.shared.exceptions import InvalidOperationError
from phantom_radio.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    MaxQueueSize,
    NonEmptyStr,
    NonNegativeInt,
    PerUserLimit,
    SkipVotesRequired,
    TrackTitleStr,
    UtcDatetimeField,
)


class Track(BaseModel):
    """Immutable catalog metadata handed to the core by the command layer."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackIdField
    title: TrackTitleStr
    artist: NonEmptyStr = "Unknown Artist"
    duration_seconds: DurationSeconds = 0
    audio_source: AudioSource
    category: NonEmptyStr = "ambient"

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        return format_duration(self.duration_seconds)

    @property
    def display_title(self) -> str:
        if self.duration_seconds:
            return f"{self.title} [{self.duration_formatted}]"
        return self.title


class QueueEntry(BaseModel):
    """One request to play a track. Never mutated once created."""

    model_config = ConfigDict(frozen=True, strict=True)

    track: Track
    requested_by: DiscordSnowflake | None = None
    requested_by_name: NonEmptyStr | None = None
    is_pinned: bool = False
    requested_at: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def lane(self) -> QueueLane:
        return QueueLane.PINNED if self.is_pinned else QueueLane.NORMAL

    @property
    def counts_against_quota(self) -> bool:
        return not self.is_pinned and self.requested_by is not None


class QueueLimits(BaseModel):
    """Capacity, quota and vote limits for one guild queue."""

    model_config = ConfigDict(frozen=True, strict=True)

    max_queue_size: MaxQueueSize = 20
    max_per_user: PerUserLimit = 5
    skip_votes_required: SkipVotesRequired = 5


class PlaybackQueue(BaseModel):
    """Aggregate root holding the queued, playing and voted-on state of one guild.

    Pinned entries form a priority lane that is always drained before the
    normal lane, and they are exempt from the capacity cap and the per-user
    quota. Within a lane order is strict arrival order.
    """

    model_config = ConfigDict(strict=True)

    guild_id: DiscordSnowflake
    limits: QueueLimits = Field(default_factory=QueueLimits)
    pinned_lane: list[QueueEntry] = Field(default_factory=list)
    normal_lane: list[QueueEntry] = Field(default_factory=list)
    current: QueueEntry | None = None
    loop_enabled: bool = False
    skip_votes: set[int] = Field(default_factory=set)
    active_counts: dict[int, NonNegativeInt] = Field(default_factory=dict)
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def pending_count(self) -> int:
        return len(self.pinned_lane) + len(self.normal_lane)

    @property
    def occupied_slots(self) -> int:
        return self.pending_count + (1 if self.current is not None else 0)

    @property
    def has_pending(self) -> bool:
        return self.pending_count > 0

    @property
    def is_full(self) -> bool:
        return self.occupied_slots >= self.limits.max_queue_size

    @property
    def upcoming(self) -> list[QueueEntry]:
        """Entries in the order they will be played."""
        return [*self.pinned_lane, *self.normal_lane]

    def active_count_for(self, user_id: int) -> int:
        return self.active_counts.get(user_id, 0)

    def touch(self, now: datetime | None = None) -> None:
        """Update last activity timestamp."""
        self.last_activity = now or utcnow()

    def is_idle_for(self, threshold: timedelta, now: datetime | None = None) -> bool:
        """Whether nothing is current and no activity happened within ``threshold``."""
        if self.current is not None:
            return False
        return (now or utcnow()) - self.last_activity >= threshold

    # ── Queue mutation ──────────────────────────────────────────────

    def enqueue(self, entry: QueueEntry) -> EnqueueOutcome:
        """Offer an entry to its lane, applying capacity and quota to normal entries."""
        if entry.is_pinned:
            self.pinned_lane.append(entry)
            return EnqueueOutcome.ACCEPTED

        if self.is_full:
            return EnqueueOutcome.REJECTED_FULL

        if entry.requested_by is not None:
            if self.active_count_for(entry.requested_by) >= self.limits.max_per_user:
                return EnqueueOutcome.REJECTED_USER_QUOTA
            self._increment_active(entry.requested_by)

        self.normal_lane.append(entry)
        return EnqueueOutcome.ACCEPTED

    def dequeue_next(self) -> QueueEntry | None:
        """Pop the next entry into ``current``; pinned lane first."""
        if self.pinned_lane:
            entry = self.pinned_lane.pop(0)
        elif self.normal_lane:
            entry = self.normal_lane.pop(0)
        else:
            return None

        self.current = entry
        self.skip_votes.clear()
        return entry

    def on_current_finished(self) -> QueueEntry | None:
        """Release the current entry and its quota slot."""
        finished = self.current
        if finished is None:
            return None

        if finished.counts_against_quota and finished.requested_by is not None:
            self._decrement_active(finished.requested_by)

        self.current = None
        self.skip_votes.clear()
        return finished

    def replay(self, entry: QueueEntry) -> None:
        """Put a just-finished entry back as current without dequeuing (loop mode)."""
        if self.current is not None:
            raise InvalidOperationError(
                operation="replay",
                current_state="playing",
                message="Cannot replay while another entry is current",
            )

        if entry.counts_against_quota and entry.requested_by is not None:
            self._increment_active(entry.requested_by)

        self.current = entry
        self.skip_votes.clear()

    def remove_by_track_id(self, track_id: str) -> bool:
        """Remove the first queued normal-lane entry for ``track_id``."""
        for index, entry in enumerate(self.normal_lane):
            if entry.track.id.value == track_id:
                removed = self.normal_lane.pop(index)
                if removed.requested_by is not None:
                    self._decrement_active(removed.requested_by)
                return True
        return False

    def clear(self) -> int:
        """Empty both lanes and reset quotas. ``current`` is left alone."""
        count = self.pending_count
        self.pinned_lane.clear()
        self.normal_lane.clear()
        self.active_counts.clear()
        return count

    def reset(self) -> None:
        """Drop everything, including the current entry and loop flag."""
        self.clear()
        self.current = None
        self.skip_votes.clear()
        self.loop_enabled = False

    def set_loop(self, enabled: bool) -> None:
        self.loop_enabled = enabled

    # ── Skip votes ──────────────────────────────────────────────────

    def add_skip_vote(self, user_id: int) -> SkipVoteTally:
        """Count one vote against the current track; at most one per user."""
        if self.current is None:
            raise InvalidOperationError(operation="vote skip", current_state="idle")

        required = self.limits.skip_votes_required
        if user_id in self.skip_votes:
            return SkipVoteTally(
                already_voted=True,
                total_votes=len(self.skip_votes),
                required=required,
                threshold_reached=False,
            )

        before = len(self.skip_votes)
        self.skip_votes.add(user_id)
        after = len(self.skip_votes)
        return SkipVoteTally(
            already_voted=False,
            total_votes=after,
            required=required,
            threshold_reached=before < required <= after,
        )

    def withdraw_skip_vote(self, user_id: int) -> bool:
        """Take back a vote on the current track. False if the user had not voted."""
        if user_id not in self.skip_votes:
            return False
        self.skip_votes.discard(user_id)
        return True

    # ── Internal ────────────────────────────────────────────────────

    def _increment_active(self, user_id: int) -> None:
        self.active_counts[user_id] = self.active_counts.get(user_id, 0) + 1

    def _decrement_active(self, user_id: int) -> None:
        remaining = self.active_counts.get(user_id, 0) - 1
        if remaining > 0:
            self.active_counts[user_id] = remaining
        else:
            self.active_counts.pop(user_id, None)
