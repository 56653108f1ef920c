"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator

from phantom_radio.domain.shared.messages import ErrorMessages
from phantom_radio.domain.shared.types import HttpUrlStr, NonEmptyStr, NonNegativeInt


@dataclass(frozen=True)
class TrackId:
    """Catalog identifier of a track (e.g. ``pbz-battle-004``)."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)


# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class LocalFileSource(BaseModel):
    """Audio stored on disk, relative to the configured music directory."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["local"] = "local"
    relative_path: NonEmptyStr

    def describe(self) -> str:
        return f"local:{self.relative_path}"


class StreamSource(BaseModel):
    """Audio fetched from a remote page or media URL."""

    model_config = ConfigDict(frozen=True, strict=True)

    kind: Literal["stream"] = "stream"
    url: HttpUrlStr

    def describe(self) -> str:
        return f"stream:{self.url}"


AudioSource = Annotated[LocalFileSource | StreamSource, Field(discriminator="kind")]
"""Exactly one of the two ways a track can be played."""


class EnqueueOutcome(Enum):
    """Result of offering an entry to a guild's playback queue."""

    ACCEPTED = "accepted"
    REJECTED_FULL = "rejected_full"
    REJECTED_USER_QUOTA = "rejected_user_quota"

    @property
    def is_accepted(self) -> bool:
        return self is EnqueueOutcome.ACCEPTED


class QueueLane(Enum):
    """The two FIFO sub-queues of a guild queue."""

    PINNED = "pinned"
    NORMAL = "normal"


class PlaybackState(Enum):
    """Coordinator lifecycle state with enforced transitions.

    State transitions:
    - DISCONNECTED -> CONNECTING (connect)
    - CONNECTING -> IDLE (joined) | DISCONNECTED (failed)
    - IDLE -> PLAYING (track started)
    - PLAYING -> PAUSED (pause) | IDLE (queue exhausted)
    - PAUSED -> PLAYING (resume) | IDLE (queue exhausted)
    - Any -> DISCONNECTED (disconnect / unrecoverable transport error)
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    def can_transition_to(self, target: PlaybackState) -> bool:
        """Check if transition to target state is valid."""
        if target is PlaybackState.DISCONNECTED:
            return True

        valid_transitions = {
            PlaybackState.DISCONNECTED: {PlaybackState.CONNECTING},
            PlaybackState.CONNECTING: {PlaybackState.IDLE},
            PlaybackState.IDLE: {PlaybackState.PLAYING, PlaybackState.CONNECTING},
            PlaybackState.PLAYING: {
                PlaybackState.PAUSED,
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
                PlaybackState.CONNECTING,
            },
            PlaybackState.PAUSED: {
                PlaybackState.PLAYING,
                PlaybackState.IDLE,
                PlaybackState.CONNECTING,
            },
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_connected(self) -> bool:
        return self in {PlaybackState.IDLE, PlaybackState.PLAYING, PlaybackState.PAUSED}

    @property
    def has_active_track(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class SkipVoteTally(BaseModel):
    """Outcome of a single skip vote against the current track."""

    model_config = ConfigDict(frozen=True, strict=True)

    already_voted: bool
    total_votes: NonNegativeInt
    required: NonNegativeInt
    threshold_reached: bool

    @property
    def votes_remaining(self) -> int:
        return max(0, self.required - self.total_votes)

    def get_progress_string(self) -> str:
        return f"{self.total_votes}/{self.required} votes"
