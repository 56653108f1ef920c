"""Command and handler for stopping playback and leaving voice."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from phantom_radio.domain.shared.messages import RequestMessages
from phantom_radio.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.session_registry import GuildSessionRegistry


class StopStatus(Enum):
    """Status codes for stop results."""

    SUCCESS = "success"
    NOTHING_PLAYING = "nothing_playing"


class StopPlaybackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    user_id: DiscordSnowflake


class StopResult(BaseModel):

    status: StopStatus
    message: str

    @property
    def is_success(self) -> bool:
        return self.status == StopStatus.SUCCESS


class StopPlaybackHandler:

    def __init__(self, *, registry: GuildSessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: StopPlaybackCommand) -> StopResult:
        if not await self._registry.destroy(command.guild_id, reason="stopped"):
            return StopResult(
                status=StopStatus.NOTHING_PLAYING, message=RequestMessages.NOTHING_PLAYING
            )

        return StopResult(status=StopStatus.SUCCESS, message=RequestMessages.STOPPED)
