"""
Play Playlist Command

Command and handler for replacing a guild's queue with a whole catalog
category, shuffled by default.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from phantom_radio.domain.music.entities import QueueEntry
from phantom_radio.domain.shared.exceptions import TransportConnectFailedError
from phantom_radio.domain.shared.messages import RequestMessages
from phantom_radio.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.repository import TrackCatalog
    from ..services.session_registry import GuildSessionRegistry


class PlaylistStatus(Enum):
    STARTED = "started"
    EMPTY_PLAYLIST = "empty_playlist"
    QUEUE_FULL = "queue_full"
    CONNECT_FAILED = "connect_failed"


class PlayPlaylistCommand(BaseModel):
    """Command to queue every track of a category."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_id: DiscordSnowflake
    category: NonEmptyStr
    shuffle: bool = True
    replace_queue: bool = True

    @field_validator("category", mode="before")
    @classmethod
    def _normalise_category(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PlayPlaylistResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: PlaylistStatus
    message: str
    queued: NonNegativeInt = 0
    skipped: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status is PlaylistStatus.STARTED


class PlayPlaylistHandler:
    """Loads a category from the catalog and queues it in one batch.

    Playlist entries carry no requester, so they use queue capacity but no
    one's per-user quota. The selection rotation is not consulted.
    """

    def __init__(self, *, registry: GuildSessionRegistry, catalog: TrackCatalog) -> None:
        self._registry = registry
        self._catalog = catalog

    async def handle(self, command: PlayPlaylistCommand) -> PlayPlaylistResult:
        tracks = await self._catalog.list_by_category(command.category)
        if not tracks:
            return PlayPlaylistResult(
                status=PlaylistStatus.EMPTY_PLAYLIST,
                message=RequestMessages.PLAYLIST_EMPTY.format(category=command.category),
            )

        try:
            coordinator = await self._registry.get_or_create(command.guild_id, command.channel_id)
        except TransportConnectFailedError:
            return PlayPlaylistResult(
                status=PlaylistStatus.CONNECT_FAILED, message=RequestMessages.CONNECT_FAILED
            )

        if command.replace_queue:
            coordinator.clear_queue()

        result = await coordinator.add_many(
            [QueueEntry(track=track) for track in tracks], shuffle=command.shuffle
        )

        if not result.accepted_count:
            return PlayPlaylistResult(
                status=PlaylistStatus.QUEUE_FULL,
                message=RequestMessages.PLAYLIST_QUEUE_FULL,
                skipped=result.rejected_count,
            )
        return PlayPlaylistResult(
            status=PlaylistStatus.STARTED,
            message=RequestMessages.PLAYLIST_STARTED.format(
                category=command.category, count=result.accepted_count
            ),
            queued=result.accepted_count,
            skipped=result.rejected_count,
        )
