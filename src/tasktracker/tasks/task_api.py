# src/tasktracker/tasks/task_api.py

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

from ..core.state import AppState
from .task_models import ReminderTask

logger = logging.getLogger(__name__)

_TIME_OF_DAY = re.compile(r"^(\d{1,2}):(\d{2})$")


class ReminderFormatError(ValueError):
    """User-supplied reminder input could not be understood."""


def resolve_remind_at(time_of_day: str, now: datetime) -> datetime:
    """
    Turn "HH:mm" into the next matching wall-clock moment.

    Today at that time, or tomorrow if that moment has already passed.
    """
    m = _TIME_OF_DAY.match((time_of_day or "").strip())
    if not m:
        raise ReminderFormatError(f"Expected HH:mm, got {time_of_day!r}")

    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ReminderFormatError(f"Time out of range: {time_of_day!r}")

    when = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if when < now.replace(second=0, microsecond=0):
        when += timedelta(days=1)
    return when


def add_reminder(
    state: AppState,
    owner: str,
    time_of_day: str,
    text: str,
    *,
    now: datetime | None = None,
) -> ReminderTask:
    text = (text or "").strip()
    if not text:
        raise ReminderFormatError("Reminder text is empty")

    remind_at = resolve_remind_at(time_of_day, now or datetime.now())
    task = state.task_store.create(owner, text, remind_at)
    state.save()
    logger.info("Reminder #%s added owner=%s at=%s", task.id, owner, task.remind_at)
    return task


def list_reminders(state: AppState, owner: str) -> list[ReminderTask]:
    return state.task_store.list_for_owner(owner)


def delete_reminder(state: AppState, owner: str, task_id: int) -> bool:
    removed = state.task_store.delete(owner, task_id)
    if removed:
        state.save()
        logger.info("Reminder #%s deleted owner=%s", task_id, owner)
    return removed
