"""Leveled stderr logging for the CLI: `[warn] message`, colored on a terminal."""

from __future__ import annotations

import logging
import sys

LOG_LEVELS: dict[str, int] = {
    "silent": logging.CRITICAL + 10,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "log": logging.INFO,
    "debug": logging.DEBUG,
}

_LEVEL_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "log",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}

# ANSI color codes
_COLORS = {
    logging.DEBUG: 34,  # blue
    logging.WARNING: 33,  # yellow
    logging.ERROR: 31,  # red
    logging.CRITICAL: 31,
}


def colorize(color: int, text: str, no_color: bool = False) -> str:
    if no_color:
        return text
    return f"\033[{color}m{text}\033[0m"


class LevelPrefixFormatter(logging.Formatter):
    def __init__(self, no_color: bool = False) -> None:
        super().__init__()
        self.no_color = no_color

    def format(self, record: logging.LogRecord) -> str:
        level = _LEVEL_NAMES.get(record.levelno, record.levelname.lower())
        color = _COLORS.get(record.levelno)
        if color is not None:
            level = colorize(color, level, self.no_color)
        return f"[{level}] {record.getMessage()}"


class _StderrHandler(logging.StreamHandler):
    """Writes to whatever `sys.stderr` is when a record is emitted."""

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, value) -> None:
        pass


def configure_logging(level: str = "log", no_color: bool = False) -> None:
    """
    Route `fmtwalk` log records to stderr at the given level name
    (`silent`, `error`, `warn`, `log`, or `debug`).
    """
    if level not in LOG_LEVELS:
        raise ValueError(
            f'Invalid --log-level value "{level}". Expected one of: {", ".join(sorted(LOG_LEVELS))}'
        )
    no_color = no_color or not sys.stderr.isatty()
    handler = _StderrHandler()
    handler.setFormatter(LevelPrefixFormatter(no_color=no_color))

    logger = logging.getLogger("fmtwalk")
    logger.handlers[:] = [handler]
    logger.setLevel(LOG_LEVELS[level])
