"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.music.entities import QueueLimits
from ..domain.shared.constants import AudioConstants
from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Database configuration for the reference track catalog."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/phantom_radio.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    owner_ids: tuple[int, ...] = Field(
        default_factory=tuple, validation_alias=AliasChoices("owner_ids", "owners")
    )

    @field_validator("owner_ids", mode="before")
    @classmethod
    def validate_owner_ids(cls, v: tuple[int, ...] | list[int]) -> tuple[int, ...]:
        """Validate Discord snowflake IDs and convert lists to tuples."""
        if isinstance(v, list):
            v = tuple(v)
        for snowflake in v:
            if not 0 < snowflake < 2**64:
                raise ValueError(f"Invalid Discord snowflake: {snowflake}")
        return v


class AudioSettings(BaseModel):
    """Audio source resolution and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    music_dir: str = Field(
        default="music", validation_alias=AliasChoices("music_dir", "music_directory")
    )
    default_volume: float = Field(default=0.5, ge=0.0, le=2.0)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": AudioConstants.FFMPEG_BEFORE_OPTIONS,
            "options": AudioConstants.FFMPEG_OPTIONS,
        }
    )
    ytdlp_format: str = AudioConstants.YTDLP_FORMAT
    connect_timeout_s: float = Field(default=10.0, gt=0.0, le=60.0)


class QueueSettings(BaseModel):
    """Per-guild queue limits."""

    model_config = SettingsConfigDict(frozen=True)

    max_queue_size: int = Field(default=20, ge=1, le=1000)
    max_per_user: int = Field(default=5, ge=1, le=100)
    skip_votes_required: int = Field(default=5, ge=1, le=100)

    def to_limits(self) -> QueueLimits:
        return QueueLimits(
            max_queue_size=self.max_queue_size,
            max_per_user=self.max_per_user,
            skip_votes_required=self.skip_votes_required,
        )


class SelectionSettings(BaseModel):
    """Song selection rotation configuration."""

    model_config = SettingsConfigDict(frozen=True)

    turn_duration_seconds: int = Field(default=120, ge=10, le=3600)

    @property
    def turn_duration(self) -> timedelta:
        return timedelta(seconds=self.turn_duration_seconds)


class IdleSettings(BaseModel):
    """Idle session reaping configuration."""

    model_config = SettingsConfigDict(frozen=True)

    idle_disconnect_minutes: int = Field(default=20, ge=1)
    sweep_interval_minutes: int = Field(default=5, ge=1)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX, etc. (nested with ``__``)
    - QUEUE__MAX_QUEUE_SIZE, SELECTION__TURN_DURATION_SECONDS, IDLE__IDLE_DISCONNECT_MINUTES
    - AUDIO__MUSIC_DIR, DATABASE__URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    idle: IdleSettings = Field(default_factory=IdleSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
