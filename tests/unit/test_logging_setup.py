"""Unit tests for transformcache.logging_setup."""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from transformcache.logging_setup import setup_logging


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def teardown_method(self) -> None:
        """Clean up the transformcache logger after each test."""
        logger = logging.getLogger("transformcache")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)

    def test_returns_package_logger(self) -> None:
        logger = setup_logging()
        assert logger.name == "transformcache"

    def test_default_level_is_info(self) -> None:
        assert setup_logging().level == logging.INFO

    def test_case_insensitive_level(self) -> None:
        assert setup_logging(level="debug").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        assert setup_logging(level="chatty").level == logging.INFO

    def test_has_rich_handler(self) -> None:
        logger = setup_logging()
        assert len([h for h in logger.handlers if isinstance(h, RichHandler)]) == 1

    def test_no_file_handler_by_default(self) -> None:
        logger = setup_logging()
        assert not [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    def test_file_handler_creates_parent_dirs(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "deep" / "cache.log"
        logger = setup_logging(log_file=log_file)
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert log_file.parent.exists()

    def test_file_handler_format_has_timestamp(self, tmp_path: Path) -> None:
        logger = setup_logging(log_file=tmp_path / "cache.log")
        fmt = [h for h in logger.handlers if isinstance(h, logging.FileHandler)][0].formatter
        assert fmt is not None
        assert "asctime" in fmt._fmt

    def test_repeated_calls_do_not_duplicate_handlers(self) -> None:
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_child_module_messages_reach_console(self) -> None:
        buffer = StringIO()
        setup_logging(level="DEBUG", console=Console(file=buffer, width=200))
        logging.getLogger("transformcache.store").debug("Cache hit: demo")
        assert "Cache hit: demo" in buffer.getvalue()
