"""Command and handler for pulling a catalog track out of every guild's queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from phantom_radio.domain.shared.types import NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..services.session_registry import GuildSessionRegistry


class RemoveTrackCommand(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    track_id: NonEmptyStr


class RemoveTrackResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    entries_removed: NonNegativeInt = 0
    guilds_affected: NonNegativeInt = 0


class RemoveTrackHandler:
    """Administrative removal. Only queued normal-lane entries are touched."""

    def __init__(self, *, registry: GuildSessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: RemoveTrackCommand) -> RemoveTrackResult:
        removed = 0
        guilds = 0
        for coordinator in self._registry.coordinators():
            count = 0
            while coordinator.remove_by_track_id(command.track_id):
                count += 1
            if count:
                removed += count
                guilds += 1

        return RemoveTrackResult(entries_removed=removed, guilds_affected=guilds)
