# flowmigrate/utils/logger.py
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "flowmigrate"

_FMT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_COLORS = (
    (logging.ERROR, "\033[91m"),    # red
    (logging.WARNING, "\033[93m"),  # yellow
    (logging.INFO, "\033[92m"),     # green
)


def parse_level(value: str | int | None, default: int = logging.INFO) -> int:
    """'debug' / 'WARNING' / 10 -> logging level; unknown names fall back to default."""
    if isinstance(value, int):
        return value
    if not value:
        return default
    lvl = logging.getLevelName(str(value).strip().upper())
    return lvl if isinstance(lvl, int) else default


class _ColorFormatter(logging.Formatter):
    """Colors by level, only when the handler writes to a terminal."""

    def __init__(self, stream, **kwargs):
        super().__init__(**kwargs)
        self._tty = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        if not self._tty:
            return base
        for level, color in _COLORS:
            if record.levelno >= level:
                return f"{color}{base}\033[0m"
        return base


def init_logger(
    name: str = ROOT_LOGGER_NAME,
    level: int | str | None = None,
    log_dir: str | Path | None = None,
    file_name: str = "migration.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    Initialize the project logger:
      - colored stream handler to stderr (stdout carries CLI output)
      - optional rotating file handler under log_dir / FLOWMIGRATE_LOG_DIR
    Level comes from `level`, else LOG_LEVEL, else INFO.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(parse_level(level if level is not None else os.getenv("LOG_LEVEL")))

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(_ColorFormatter(sys.stderr, fmt=_FMT, datefmt=_DATEFMT))
    logger.addHandler(sh)

    log_dir = log_dir or os.getenv("FLOWMIGRATE_LOG_DIR")
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=_FMT, datefmt=_DATEFMT))
        logger.addHandler(fh)

    return logger


def set_level(level: str | int) -> int:
    """Change the project log level at runtime (CLI --log-level). Returns the level applied."""
    lvl = parse_level(level)
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(lvl)
    return lvl


# Convenience default logger
log = init_logger()


def get_logger(child: str) -> logging.Logger:
    """Create/get a child logger under the root project logger."""
    return logging.getLogger(ROOT_LOGGER_NAME).getChild(child)
