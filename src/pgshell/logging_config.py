"""Logging setup for the pgshell command line tools."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "pgshell"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> logging.Logger:
    """Configure the pgshell logger.

    Messages go to stderr through rich, and optionally to a log file that
    records everything down to DEBUG. Repeated calls only adjust the level.

    Args:
        level: Console log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path of a file to append log records to

    Returns:
        The configured package logger

    Raises:
        ValueError: If level is not a known log level name
    """
    global _configured

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(LOGGER_NAME)

    if _configured:
        for handler in logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(numeric_level)
        return logger

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    console_handler.setLevel(numeric_level)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG)
    _configured = True

    logger.debug("Logging configured: level=%s, file=%s", level, log_file)
    return logger
