# tests/test_logging_setup.py

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from tasktracker.logging_setup import ConsoleThresholdFilter, setup_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_thresholds() -> None:
    f = ConsoleThresholdFilter()

    assert f.filter(_record("tasktracker.tasks.task_scheduler", logging.DEBUG))
    assert not f.filter(_record("tasktracker.connectors.matrix_connector", logging.INFO))
    assert f.filter(_record("tasktracker.connectors.matrix_client", logging.WARNING))
    assert f.filter(_record("tasktracker.connectors.console_connector", logging.INFO))
    assert not f.filter(_record("nio.rooms", logging.WARNING))
    assert f.filter(_record("nio.rooms", logging.ERROR))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("aiohttp.client", logging.WARNING))


def test_console_filter_custom_rules() -> None:
    f = ConsoleThresholdFilter({"a": logging.INFO, "a.b": logging.CRITICAL}, default=logging.NOTSET)

    assert f.threshold_for("a.x") == logging.INFO
    assert f.threshold_for("a.b.c") == logging.CRITICAL
    assert f.threshold_for("other") == logging.NOTSET


def test_setup_logging_installs_rotating_file_and_filtered_console(tmp_path: Path, restore_root_logging) -> None:
    root = restore_root_logging
    log_file = setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING, max_bytes=2048, backup_count=2)

    assert log_file == tmp_path / "logs" / "tasktracker.log"
    assert root.level == logging.DEBUG

    [rotating] = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert rotating.maxBytes == 2048
    assert rotating.backupCount == 2

    [console] = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]
    assert console.level == logging.WARNING
    assert any(isinstance(f, ConsoleThresholdFilter) for f in console.filters)

    logging.getLogger("tasktracker.tasks.task_scheduler").info("Task 7 delivered")
    rotating.flush()
    text = log_file.read_text("utf-8")
    assert "Task 7 delivered" in text
    assert "[MainThread]" in text


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path: Path, restore_root_logging) -> None:
    root = restore_root_logging
    setup_logging(log_dir=tmp_path)
    setup_logging(log_dir=tmp_path)

    assert len(root.handlers) == 2
