"""
Application Commands (Write Side)

Command objects and their handlers for write operations.
Commands represent intent to change the system state.
"""

from phantom_radio.application.commands.play_playlist import (
    PlaylistStatus,
    PlayPlaylistCommand,
    PlayPlaylistHandler,
    PlayPlaylistResult,
)
from phantom_radio.application.commands.remove_track import (
    RemoveTrackCommand,
    RemoveTrackHandler,
    RemoveTrackResult,
)
from phantom_radio.application.commands.request_track import (
    RequestStatus,
    RequestTrackCommand,
    RequestTrackHandler,
    RequestTrackResult,
)
from phantom_radio.application.commands.stop_playback import (
    StopPlaybackCommand,
    StopPlaybackHandler,
    StopResult,
)
from phantom_radio.application.commands.vote_skip import (
    VoteResult,
    VoteSkipCommand,
    VoteSkipHandler,
    VoteSkipResult,
)

__all__ = [
    # Request
    "RequestTrackCommand",
    "RequestTrackHandler",
    "RequestTrackResult",
    "RequestStatus",
    # Playlist
    "PlayPlaylistCommand",
    "PlayPlaylistHandler",
    "PlayPlaylistResult",
    "PlaylistStatus",
    # Vote
    "VoteSkipCommand",
    "VoteSkipHandler",
    "VoteSkipResult",
    "VoteResult",
    # Remove
    "RemoveTrackCommand",
    "RemoveTrackHandler",
    "RemoveTrackResult",
    # Stop
    "StopPlaybackCommand",
    "StopPlaybackHandler",
    "StopResult",
]
