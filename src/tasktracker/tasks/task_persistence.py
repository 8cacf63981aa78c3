# src/tasktracker/tasks/task_persistence.py

"""
JSON snapshot persistence for TaskStore.

The whole store is written as one document and replaces the previous file:

    {"Tasks": [{"Id": 1, "UserId": "...", "Text": "...", "ReminderTime": "2026-10-18T14:30:00"}]}

Loading never fails: a missing or broken file yields an empty store.
Saving never raises on I/O errors: the store keeps working in memory.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from .task_models import ReminderTask
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def load_store(path: str | Path) -> TaskStore:
    path = Path(path)
    if not path.exists():
        logger.info("No task file at %s; starting with an empty store", path)
        return TaskStore()

    try:
        data = json.loads(path.read_text("utf-8"))
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object at the top level")
        records = data.get("Tasks") or []
        if not isinstance(records, list):
            raise ValueError("'Tasks' must be a list")
        tasks = [ReminderTask.from_record(r) for r in records]
    except (OSError, ValueError, TypeError):
        # Broken file: start over rather than refuse to run. Previous contents are lost on next save.
        logger.exception("Failed to load tasks from %s; starting with an empty store", path)
        return TaskStore()

    store = TaskStore(tasks)
    logger.info("Loaded %d tasks from %s", len(tasks), path)
    return store


def dump_tasks(tasks: list[ReminderTask]) -> str:
    return json.dumps({"Tasks": [t.to_record() for t in tasks]}, ensure_ascii=False, indent=2)


def save_store(store: TaskStore, path: str | Path) -> bool:
    """Write a snapshot of store to path atomically. Returns False on I/O failure."""
    path = Path(path)
    tasks = store.snapshot()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(dump_tasks(tasks), "utf-8")
        os.replace(tmp, path)
    except OSError:
        logger.exception("Failed to save %d tasks to %s", len(tasks), path)
        return False

    logger.debug("Saved %d tasks to %s", len(tasks), path)
    return True


class TaskFile:
    """
    Persistence bound to one file.

    save() calls are serialized and the snapshot is taken inside that critical section,
    so whichever save finishes last wrote the newest store state.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._save_lock = threading.Lock()

    def load(self) -> TaskStore:
        return load_store(self.path)

    def save(self, store: TaskStore) -> bool:
        with self._save_lock:
            return save_store(store, self.path)
