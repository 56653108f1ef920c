"""Console logging formatter that colours level names and dims logger names."""

from __future__ import annotations

import logging
import os
import sys
from typing import IO, Any


class ColoredFormatter(logging.Formatter):
    """Apply ANSI colours to ``levelname`` and dim third-party ``name`` fields.

    Colour is used only when the target stream is a TTY. ``NO_COLOR`` always
    disables it and ``FORCE_COLOR`` enables it for non-TTY streams such as
    pipes into a log file.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    DIM = "\033[2m"
    RESET = "\033[0m"
    APP_LOGGER_PREFIX = "phantom_radio"

    def __init__(self, *args: Any, stream: IO[str] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream

    def use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        if os.environ.get("FORCE_COLOR") is not None:
            return True
        stream = self._stream or sys.stdout
        isatty = getattr(stream, "isatty", None)
        return bool(isatty and isatty())

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color():
            return super().format(record)

        # Work on a copy so other handlers see the raw record.
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        if not record.name.startswith(self.APP_LOGGER_PREFIX):
            record.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(record)
