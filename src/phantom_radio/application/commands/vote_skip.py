"""
Vote Skip Command

Command and handler for vote-based skipping.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from phantom_radio.domain.shared.messages import RequestMessages
from phantom_radio.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.session_registry import GuildSessionRegistry


class VoteResult(Enum):
    """What happened when a user voted to skip."""

    NO_PLAYING = "no_playing"
    ALREADY_VOTED = "already_voted"
    VOTE_RECORDED = "vote_recorded"
    THRESHOLD_MET = "threshold_met"

    @property
    def is_success(self) -> bool:
        return self in {VoteResult.VOTE_RECORDED, VoteResult.THRESHOLD_MET}


class VoteSkipCommand(BaseModel):
    """Command to cast a vote to skip the current track."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    user_id: DiscordSnowflake


class VoteSkipResult(BaseModel):
    """Result of a vote skip command."""

    model_config = ConfigDict(frozen=True, strict=True)

    result: VoteResult
    message: str
    votes_current: NonNegativeInt = 0
    votes_needed: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.result.is_success

    @property
    def action_executed(self) -> bool:
        return self.result is VoteResult.THRESHOLD_MET


class VoteSkipHandler:
    """Handler for VoteSkipCommand."""

    def __init__(self, *, registry: GuildSessionRegistry) -> None:
        self._registry = registry

    async def handle(self, command: VoteSkipCommand) -> VoteSkipResult:
        coordinator = self._registry.get(command.guild_id)
        tally = await coordinator.vote_skip(command.user_id) if coordinator else None
        if tally is None:
            return VoteSkipResult(
                result=VoteResult.NO_PLAYING, message=RequestMessages.NOTHING_PLAYING
            )

        counts = {"votes_current": tally.total_votes, "votes_needed": tally.required}
        if tally.already_voted:
            return VoteSkipResult(
                result=VoteResult.ALREADY_VOTED,
                message=RequestMessages.ALREADY_VOTED.format(**counts),
                **counts,
            )
        if tally.threshold_reached:
            return VoteSkipResult(
                result=VoteResult.THRESHOLD_MET, message=RequestMessages.VOTE_PASSED, **counts
            )
        return VoteSkipResult(
            result=VoteResult.VOTE_RECORDED,
            message=RequestMessages.VOTE_RECORDED.format(**counts),
            **counts,
        )
