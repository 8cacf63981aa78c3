# src/tasktracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class ReminderTask:
    """
    One scheduled reminder.

    remind_at is naive local wall-clock time with minute precision.
    Instances are never mutated; the store replaces or drops them.
    """

    id: int
    owner: str
    text: str
    remind_at: datetime

    def to_record(self) -> dict[str, Any]:
        # PascalCase keys keep files written by older versions readable.
        return {
            "Id": self.id,
            "UserId": self.owner,
            "Text": self.text,
            "ReminderTime": self.remind_at.isoformat(),
        }

    @classmethod
    def from_record(cls, raw: dict[str, Any]) -> ReminderTask:
        if not isinstance(raw, dict):
            raise ValueError(f"task record must be an object, got {type(raw).__name__}")
        try:
            task_id = int(raw["Id"])
            owner = raw["UserId"]
            text = raw["Text"]
            remind_at = datetime.fromisoformat(str(raw["ReminderTime"]))
        except KeyError as e:
            raise ValueError(f"task record is missing field {e}") from e
        if owner is None or str(owner).strip() == "":
            raise ValueError(f"task {task_id} has no owner")
        if remind_at.tzinfo is not None:
            # Offset timestamps (e.g. "+03:00") become naive local wall-clock time.
            remind_at = remind_at.astimezone().replace(tzinfo=None)
        return cls(
            id=task_id,
            owner=str(owner),
            text=str(text or ""),
            remind_at=remind_at,
        )
