# src/tasktracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The scheduler and the command layer depend on Protocols instead of concrete
connectors, so transports stay swappable and tests can use in-memory fakes.
"""

from datetime import datetime
from typing import Protocol

from ..tasks.task_models import ReminderTask


class Notifier(Protocol):
    """
    Connector-side port: how the scheduler delivers text to an owner.

    Returns True when the message was handed to the transport, False otherwise.
    May also raise; the scheduler treats an exception like False.
    """

    async def notify(self, owner: str, text: str) -> bool: ...


class RoutedNotifier(Notifier, Protocol):
    """A notifier that can tell whether an owner id belongs to its transport."""

    def handles(self, owner: str) -> bool: ...


class TaskRepo(Protocol):
    # Command API
    def create(self, owner: str, text: str, remind_at: datetime) -> ReminderTask: ...
    def list_for_owner(self, owner: str) -> list[ReminderTask]: ...
    def delete(self, owner: str, task_id: int) -> bool: ...

    # Scheduler API
    def due_before(self, instant: datetime) -> list[ReminderTask]: ...
    def remove(self, task: ReminderTask) -> bool: ...
