# src/tasktracker/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime

from .task_models import ReminderTask

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory reminder store.

    Thread-safety:
    - one lock guards the list and the id counter
    - every public method holds it for the whole logical operation and does no I/O under it
    - readers get copies, never the live list

    Ids come from a counter that only grows, so a deleted id is never handed out again
    (the counter starts after the highest id that was loaded).
    """

    def __init__(self, tasks: Iterable[ReminderTask] = ()) -> None:
        self._lock = threading.Lock()
        self._tasks: list[ReminderTask] = list(tasks)
        self._next_id = max((t.id for t in self._tasks), default=0) + 1
        logger.debug("TaskStore ready total=%d next_id=%d", len(self._tasks), self._next_id)

    # ---- public API ----

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def snapshot(self) -> list[ReminderTask]:
        with self._lock:
            return list(self._tasks)

    def create(self, owner: str, text: str, remind_at: datetime) -> ReminderTask:
        if not owner:
            raise ValueError("owner is required")
        if not text or not text.strip():
            raise ValueError("text is required")

        if remind_at.tzinfo is not None:
            remind_at = remind_at.astimezone().replace(tzinfo=None)

        with self._lock:
            task = ReminderTask(
                id=self._next_id,
                owner=owner,
                text=text.strip(),
                remind_at=remind_at.replace(second=0, microsecond=0),
            )
            self._next_id += 1
            self._tasks.append(task)

        logger.debug("Task added id=%s owner=%s remind_at=%s", task.id, owner, task.remind_at)
        return task

    def list_for_owner(self, owner: str) -> list[ReminderTask]:
        with self._lock:
            return [t for t in self._tasks if t.owner == owner]

    def delete(self, owner: str, task_id: int) -> bool:
        """Remove the task only if both id and owner match."""
        with self._lock:
            for i, t in enumerate(self._tasks):
                if t.id == task_id and t.owner == owner:
                    del self._tasks[i]
                    break
            else:
                return False

        logger.debug("Task deleted id=%s owner=%s", task_id, owner)
        return True

    def due_before(self, instant: datetime) -> list[ReminderTask]:
        """Tasks whose remind_at is at or before instant, across all owners."""
        with self._lock:
            return [t for t in self._tasks if t.remind_at <= instant]

    def remove(self, task: ReminderTask) -> bool:
        with self._lock:
            try:
                self._tasks.remove(task)
            except ValueError:
                return False
        return True
