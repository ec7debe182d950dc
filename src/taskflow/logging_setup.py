"""Logging configuration for taskflow."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow taskflow logs at the configured level
    - suppress Python warnings (captured as 'py.warnings') unless ERROR+
    - suppress third-party noise unless ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "taskflow" or record.name.startswith("taskflow."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    console_level: int | str = logging.WARNING,
    log_file: str | Path | None = None,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler: rich, on stderr, filtered for interactive use
    - File handler (optional): full logs for debugging

    Call this once per process, before the first log call. Calling it again
    replaces the handlers installed by the previous call.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    # Console (interactive)
    ch = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
    ch.setLevel(console_level)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    # File (everything)
    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(fh)

    # Route warnings.warn(...) into logging as 'py.warnings'
    logging.captureWarnings(True)
