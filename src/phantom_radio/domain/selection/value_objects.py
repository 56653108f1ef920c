"""
Selection Domain Value Objects

Immutable results returned by the selection rotation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from phantom_radio.domain.shared.types import QueuePositionInt


class SelectionCheck(BaseModel):
    """Whether a user may pick a song right now."""

    model_config = ConfigDict(frozen=True, strict=True)

    allowed: bool
    position: QueuePositionInt | None = None
    reason: str | None = None


class JoinResult(BaseModel):
    """Outcome of joining the rotation. Position 0 means the user is selecting."""

    model_config = ConfigDict(frozen=True, strict=True)

    accepted: bool
    position: QueuePositionInt
    message: str
    started_turn: bool = False


class LeaveResult(BaseModel):
    """Outcome of leaving the rotation or passing a turn."""

    model_config = ConfigDict(frozen=True, strict=True)

    accepted: bool
    message: str
    advanced: bool = False
