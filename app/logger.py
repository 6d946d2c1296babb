"""Loguru-based logging setup."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

LOG_FILE_NAME = "parrot-organizer.log"


def setup_logger(log_dir: Path | None = None, debug: bool = False) -> Path | None:
    """
    Configure loguru with console + rotating file output.

    The console shows INFO and above (DEBUG with *debug*); the file always
    records DEBUG. Returns the log file path, or None without *log_dir*.
    """
    logger.remove()

    # Console
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        format="<green>{time:HH:mm:ss}</green> | <level>{level:<7}</level> | {message}",
        colorize=True,
    )

    if not log_dir:
        return None

    # File
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME
    logger.add(
        str(log_path),
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level:<7} | {name}:{line} | {message}",
        rotation="5 MB",
        retention="7 days",
        encoding="utf-8",
    )
    return log_path
