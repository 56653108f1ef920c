#!/usr/bin/env python3
"""Phantom Radio entry point: load settings, configure logging, run the bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from phantom_radio.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from phantom_radio.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_FALLBACK_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FALLBACK_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO", config_path: Path = _LOGGING_CONFIG_PATH) -> None:
    """Apply the JSON logging config, falling back to a plain console format.

    ``log_level`` always overrides the root level from the file.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    try:
        config: dict[str, Any] = json.loads(config_path.read_text(encoding="utf-8"))
        logging.config.dictConfig(config)
    except (OSError, ValueError, TypeError) as exc:
        logging.basicConfig(level=level, format=_FALLBACK_FORMAT, datefmt=_FALLBACK_DATEFMT)
        logger.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, config_path, exc)

    logging.getLogger().setLevel(level)


def load_settings() -> Settings | None:
    """Load settings, logging each invalid field instead of raising."""
    from phantom_radio.config.settings import get_settings

    try:
        return get_settings()
    except ValidationError as exc:
        setup_logging()
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"]) or "<root>"
            logger.error(LogTemplates.SETTINGS_INVALID, location, error["msg"])
        return None


def log_startup_summary(settings: Settings) -> None:
    logger.info(LogTemplates.BOT_STARTING, settings.environment)

    queue = settings.queue
    logger.info(
        LogTemplates.STARTUP_QUEUE_LIMITS,
        queue.max_queue_size,
        queue.max_per_user,
        queue.skip_votes_required,
    )
    logger.info(LogTemplates.STARTUP_SELECTION, settings.selection.turn_duration_seconds)
    logger.info(
        LogTemplates.STARTUP_IDLE,
        settings.idle.idle_disconnect_minutes,
        settings.idle.sweep_interval_minutes,
    )

    audio = settings.audio
    logger.info(LogTemplates.STARTUP_AUDIO, audio.music_dir, audio.default_volume)
    if not Path(audio.music_dir).is_dir():
        logger.warning(LogTemplates.STARTUP_MUSIC_DIR_MISSING, audio.music_dir)


def run(settings: Settings, token: str) -> int:
    """Wire the container and bot, then block until the bot stops."""
    from phantom_radio.config.container import create_container
    from phantom_radio.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1

    logger.info(LogTemplates.BOT_STOPPED)
    return 0


def main() -> int:
    settings = load_settings()
    if settings is None:
        return 1

    setup_logging(settings.log_level)

    token = settings.discord.token.get_secret_value()
    if not token:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return 1

    log_startup_summary(settings)
    return run(settings, token)


def cli() -> None:
    """Console script entry point (``phantom-radio``)."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
