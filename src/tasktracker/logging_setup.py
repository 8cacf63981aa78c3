# src/tasktracker/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "tasktracker.log"

# Longest matching prefix wins. Loggers not listed fall back to the filter's default.
CONSOLE_THRESHOLDS: Mapping[str, int] = {
    "tasktracker": logging.NOTSET,
    # Sync loop and client run in the service thread and would drown the REPL prompt.
    "tasktracker.connectors.matrix_": logging.WARNING,
    "nio": logging.ERROR,
    "py.warnings": logging.ERROR,
}


class ConsoleThresholdFilter(logging.Filter):
    """Per-logger minimum levels for the interactive console."""

    def __init__(
        self,
        thresholds: Mapping[str, int] = CONSOLE_THRESHOLDS,
        default: int = logging.ERROR,
    ) -> None:
        super().__init__()
        # Sorted longest first so "tasktracker.connectors.matrix_" beats "tasktracker".
        self._rules = sorted(thresholds.items(), key=lambda kv: len(kv[0]), reverse=True)
        self._default = default

    def threshold_for(self, name: str) -> int:
        for prefix, level in self._rules:
            if name.startswith(prefix):
                return level
        return self._default

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.threshold_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/tasktracker",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> Path:
    """
    Configure root logging for the reminder service.

    stderr gets a filtered view for the console REPL; the log file under log_dir
    keeps everything at file_level and rotates, since the service runs unattended
    for days. Records carry the thread name because the scheduler and Matrix
    connector live in a background thread.

    Replaces any handlers already on the root logger. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(ConsoleThresholdFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    logging.getLogger(__name__).debug("Logging to %s (console level %s)", log_file, logging.getLevelName(console_level))
    return log_file
