"""Query for retrieving the current queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from phantom_radio.application.services.queue_models import QueueSnapshot
from phantom_radio.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..services.session_registry import GuildSessionRegistry


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class GetQueueHandler:

    def __init__(self, *, registry: GuildSessionRegistry) -> None:
        self._registry = registry

    async def handle(self, query: GetQueueQuery) -> QueueSnapshot:
        coordinator = self._registry.get(query.guild_id)
        if coordinator is None:
            return QueueSnapshot.empty(query.guild_id)
        return coordinator.snapshot()
