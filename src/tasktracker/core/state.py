# src/tasktracker/core/state.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.task_persistence import TaskFile
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Application context built once by the composition root.

    Connectors and the scheduler receive this object instead of reaching for globals.
    close() is the single teardown point: flush the store, then refuse further saves.
    """

    settings: Any
    task_store: TaskStore
    task_file: TaskFile

    closed: bool = False
    _close_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def save(self) -> bool:
        if self.closed:
            logger.debug("save() after close ignored")
            return False
        return self.task_file.save(self.task_store)

    def close(self) -> None:
        with self._close_lock:
            if self.closed:
                return
            self.task_file.save(self.task_store)
            self.closed = True
        logger.info("State closed (%d tasks flushed to %s)", self.task_store.count(), self.task_file.path)
