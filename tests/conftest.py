# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktracker.cli.bootstrap import create_initial_state
from tasktracker.core.state import AppState


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any .env file.
    """
    return SimpleNamespace(
        app_name="tasktracker-test",
        storage_path=tmp_path / "data" / "tasks.json",
        console_enabled=True,
        matrix_enabled=False,
        matrix_rooms=[],
        scheduler_interval_seconds=0.01,
        notify_max_attempts=3,
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """AppState wired with the real in-memory store and a JSON file under tmp_path."""
    return create_initial_state(settings=settings)
