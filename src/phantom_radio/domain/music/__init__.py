"""
Music Bounded Context

Domain logic for tracks, queue entries and the per-guild playback queue.
"""

from phantom_radio.domain.music.entities import PlaybackQueue, QueueEntry, QueueLimits, Track
from phantom_radio.domain.music.repository import TrackCatalog
from phantom_radio.domain.music.value_objects import (
    AudioSource,
    EnqueueOutcome,
    LocalFileSource,
    PlaybackState,
    QueueLane,
    SkipVoteTally,
    StreamSource,
    TrackId,
)

__all__ = [
    # Entities
    "Track",
    "QueueEntry",
    "QueueLimits",
    "PlaybackQueue",
    # Value Objects
    "TrackId",
    "AudioSource",
    "LocalFileSource",
    "StreamSource",
    "EnqueueOutcome",
    "QueueLane",
    "PlaybackState",
    "SkipVoteTally",
    # Repository
    "TrackCatalog",
]
