# src/tasktracker/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that:
- fetches reminders whose time has come,
- sends them via an injected notifier port,
- removes delivered ones and persists the store once per cycle.

A failed delivery stays in the store and is retried on the next cycle, up to
max_attempts; after that it is dropped and logged so an unreachable owner does
not keep the reminder around forever.

Transport routing and formatting beyond the reminder text belong to the connector.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..core.ports import Notifier, TaskRepo
from .task_models import ReminderTask

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0
DEFAULT_MAX_ATTEMPTS = 5


def render_reminder(task: ReminderTask) -> str:
    return f"⏰ Reminder: {task.text}"


@dataclass(slots=True)
class CycleResult:
    delivered: list[ReminderTask] = field(default_factory=list)
    failed: list[ReminderTask] = field(default_factory=list)
    dropped: list[ReminderTask] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.delivered or self.dropped)


class ReminderScheduler:
    """
    Delivers due reminders.

    Example:
        scheduler = ReminderScheduler(state.task_store, notifier, persist=state.save)
        asyncio.create_task(scheduler.run())

    There is no stop()/pause(): the loop lives as long as the process. Hosts that own
    the event loop cancel the task on shutdown.
    """

    def __init__(
        self,
        store: TaskRepo,
        notifier: Notifier,
        *,
        persist: Callable[[], object] | None = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._persist = persist
        self._interval = max(0.01, float(interval_seconds))
        self._max_attempts = max(1, int(max_attempts))
        self._clock = clock
        self._attempts: dict[int, int] = {}
        self.dropped: list[ReminderTask] = []

    def attempts(self, task_id: int) -> int:
        return self._attempts.get(task_id, 0)

    async def _deliver(self, task: ReminderTask) -> bool:
        try:
            return bool(await self._notifier.notify(task.owner, render_reminder(task)))
        except Exception:
            logger.exception("notify failed task_id=%s owner=%s", task.id, task.owner)
            return False

    async def run_cycle(self, now: datetime | None = None) -> CycleResult:
        """One scan: send everything due at `now`, remove what was sent, save if anything changed."""
        if now is None:
            now = self._clock()

        result = CycleResult()
        due = self._store.due_before(now)
        if due:
            logger.debug("%d reminder(s) due at %s", len(due), now)

        # A retried task stays due until it leaves the store, so anything missing was deleted.
        due_ids = {t.id for t in due}
        for task_id in [k for k in self._attempts if k not in due_ids]:
            del self._attempts[task_id]

        for task in due:
            if await self._deliver(task):
                self._store.remove(task)
                self._attempts.pop(task.id, None)
                result.delivered.append(task)
                logger.info("Task %s delivered to %s", task.id, task.owner)
                continue

            attempts = self._attempts.get(task.id, 0) + 1
            if attempts >= self._max_attempts:
                self._store.remove(task)
                self._attempts.pop(task.id, None)
                self.dropped.append(task)
                result.dropped.append(task)
                logger.error(
                    "Task %s for %s dropped after %d failed deliveries: %r",
                    task.id,
                    task.owner,
                    attempts,
                    task.text,
                )
            else:
                self._attempts[task.id] = attempts
                result.failed.append(task)
                logger.warning(
                    "Task %s not delivered (attempt %d/%d); will retry next cycle",
                    task.id,
                    attempts,
                    self._max_attempts,
                )

        if result.changed and self._persist is not None:
            # File I/O runs on a worker thread so the loop keeps serving connectors.
            await asyncio.to_thread(self._persist)

        return result

    async def run(self) -> None:
        logger.info(
            "Reminder scheduler started (interval=%.1fs, max_attempts=%d)",
            self._interval,
            self._max_attempts,
        )
        while True:
            try:
                await self.run_cycle()
            except Exception:
                logger.exception("Reminder scheduler cycle failed")
            await asyncio.sleep(self._interval)
