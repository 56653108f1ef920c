"""Command and handler for requesting a catalog track into a guild's queue."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from phantom_radio.domain.music.entities import QueueEntry
from phantom_radio.domain.music.value_objects import EnqueueOutcome
from phantom_radio.domain.shared.exceptions import TransportConnectFailedError
from phantom_radio.domain.shared.messages import RequestMessages
from phantom_radio.domain.shared.types import DiscordSnowflake, NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import QueueLimits
    from ...domain.music.repository import TrackCatalog
    from ..services.selection_service import SelectionTurnCoordinator
    from ..services.session_registry import GuildSessionRegistry


class RequestStatus(Enum):
    """Status codes for track request results."""

    QUEUED = "queued"
    NOT_YOUR_TURN = "not_your_turn"
    TRACK_NOT_FOUND = "track_not_found"
    QUEUE_FULL = "queue_full"
    USER_QUOTA = "user_quota"
    CONNECT_FAILED = "connect_failed"


class RequestTrackCommand(BaseModel):
    """A user (or an admin pinning a track) asking for a catalog track."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_id: DiscordSnowflake
    user_name: NonEmptyStr
    track_id: NonEmptyStr
    pinned: bool = False

    @field_validator("track_id", mode="before")
    @classmethod
    def _strip_track_id(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class RequestTrackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: RequestStatus
    message: str
    entry: QueueEntry | None = None

    @property
    def is_success(self) -> bool:
        return self.status is RequestStatus.QUEUED

    @classmethod
    def error(cls, status: RequestStatus, message: str) -> RequestTrackResult:
        return cls(status=status, message=message)


class RequestTrackHandler:
    """Gates a request on the selection rotation, then queues it.

    Pinned requests skip the rotation. A successful normal request ends the
    requester's selection turn.
    """

    def __init__(
        self,
        *,
        registry: GuildSessionRegistry,
        catalog: TrackCatalog,
        selection: SelectionTurnCoordinator,
        limits: QueueLimits,
    ) -> None:
        self._registry = registry
        self._catalog = catalog
        self._selection = selection
        self._limits = limits

    async def handle(self, command: RequestTrackCommand) -> RequestTrackResult:
        if not command.pinned:
            check = self._selection.can_select(command.user_id)
            if not check.allowed:
                return RequestTrackResult.error(RequestStatus.NOT_YOUR_TURN, check.reason or "")

        track = await self._catalog.get_by_id(command.track_id)
        if track is None:
            return RequestTrackResult.error(
                RequestStatus.TRACK_NOT_FOUND, RequestMessages.TRACK_NOT_FOUND
            )

        try:
            coordinator = await self._registry.get_or_create(command.guild_id, command.channel_id)
        except TransportConnectFailedError:
            return RequestTrackResult.error(
                RequestStatus.CONNECT_FAILED, RequestMessages.CONNECT_FAILED
            )

        entry = QueueEntry(
            track=track,
            requested_by=command.user_id,
            requested_by_name=command.user_name,
            is_pinned=command.pinned,
        )
        outcome = await coordinator.add_to_queue(entry)

        if outcome is EnqueueOutcome.REJECTED_FULL:
            return RequestTrackResult.error(
                RequestStatus.QUEUE_FULL,
                RequestMessages.QUEUE_FULL.format(max_size=self._limits.max_queue_size),
            )
        if outcome is EnqueueOutcome.REJECTED_USER_QUOTA:
            return RequestTrackResult.error(
                RequestStatus.USER_QUOTA,
                RequestMessages.USER_QUOTA.format(limit=self._limits.max_per_user),
            )

        if not command.pinned:
            await self._selection.on_song_selected(command.user_id)

        return RequestTrackResult(
            status=RequestStatus.QUEUED,
            message=RequestMessages.QUEUED.format(title=track.title),
            entry=entry,
        )
