# src/tasktracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- takes settings loaded once by main,
- ensures local (gitignored) directories exist,
- loads the task file and wires everything into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_persistence import TaskFile

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.storage_path.parent.mkdir(parents=True, exist_ok=True)
    if getattr(settings, "matrix_enabled", False):
        settings.matrix_store_path.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_file = TaskFile(settings.storage_path)
    state = AppState(
        settings=settings,
        task_store=task_file.load(),
        task_file=task_file,
    )
    logger.info("State ready: %d tasks, storage=%s", state.task_store.count(), task_file.path)
    return state
