# src/taskboard/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

_WATCHER_LOGGER = "taskboard.storage.notifier"


class _ConsoleNoiseFilter(logging.Filter):
    """Console shows taskboard logs; the change watcher and everything else only when serious."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_WATCHER_LOGGER):
            return record.levelno >= logging.WARNING
        if record.name.startswith("taskboard."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskboard",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """Send filtered logs to stderr and everything to <log_dir>/taskboard.log."""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    log_file = logging.FileHandler(str(log_dir / "taskboard.log"), encoding="utf-8")
    log_file.setLevel(file_level)
    log_file.setFormatter(fmt)
    root.addHandler(log_file)

    logging.captureWarnings(True)
