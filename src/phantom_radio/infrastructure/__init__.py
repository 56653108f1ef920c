"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite track catalog)
- Discord (bot shell, voice adapter)
- Audio (local files, yt-dlp)
"""

from phantom_radio.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from phantom_radio.infrastructure.discord.bot import create_bot
from phantom_radio.infrastructure.persistence.database import Database

__all__ = [
    "create_bot",
    "DiscordVoiceAdapter",
    "Database",
]
