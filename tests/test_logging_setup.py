"""Tests for taskflow.logging_setup module."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.logging import RichHandler

from taskflow.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


class TestConsoleNoiseFilter:
    """Tests for the console filter."""

    def test_own_logs_pass(self) -> None:
        """Test taskflow records pass at any level."""
        f = _ConsoleNoiseFilter()
        assert f.filter(_record("taskflow.store", logging.DEBUG))
        assert f.filter(_record("taskflow", logging.INFO))

    def test_third_party_needs_error(self) -> None:
        """Test other loggers are muted below ERROR."""
        f = _ConsoleNoiseFilter()
        assert not f.filter(_record("asyncio", logging.WARNING))
        assert not f.filter(_record("py.warnings", logging.WARNING))
        assert f.filter(_record("asyncio", logging.ERROR))

    def test_prefix_lookalike(self) -> None:
        """Test a logger merely starting with 'taskflow' is third-party."""
        assert not _ConsoleNoiseFilter().filter(_record("taskflowx", logging.INFO))


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_only(self) -> None:
        """Test without a log file only the console handler is installed."""
        setup_logging(console_level=logging.INFO)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RichHandler)
        assert handlers[0].level == logging.INFO

    def test_file_handler(self, tmp_path: Path) -> None:
        """Test the log file receives debug records."""
        log_file = tmp_path / "logs" / "taskflow.log"
        setup_logging(log_file=log_file)
        logging.getLogger("taskflow.test").debug("hello from the test")

        for h in logging.getLogger().handlers:
            h.flush()
        assert "hello from the test" in log_file.read_text()
        assert "DEBUG taskflow.test" in log_file.read_text()

    def test_repeated_calls_do_not_duplicate(self, tmp_path: Path) -> None:
        """Test calling twice replaces the handlers."""
        setup_logging(log_file=tmp_path / "a.log")
        setup_logging(log_file=tmp_path / "b.log")
        assert len(logging.getLogger().handlers) == 2

    def test_accepts_level_names(self) -> None:
        """Test string level names are accepted."""
        setup_logging(console_level="DEBUG")
        assert logging.getLogger().handlers[0].level == logging.DEBUG
