"""Tests for logging setup."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from app.logger import LOG_FILE_NAME, setup_logger


class TestSetupLogger:
    def test_console_only(self) -> None:
        assert setup_logger() is None

    def test_writes_log_file(self, tmp_path: Path) -> None:
        log_path = setup_logger(tmp_path / "logs")
        assert log_path == tmp_path / "logs" / LOG_FILE_NAME
        logger.debug("loaded 3 games")
        logger.remove()  # closes and flushes the file sink
        assert "loaded 3 games" in log_path.read_text(encoding="utf-8")
