# tests/test_task_persistence.py

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from tasktracker.tasks.task_persistence import TaskFile, load_store, save_store
from tasktracker.tasks.task_scheduler import ReminderScheduler
from tasktracker.tasks.task_store import TaskStore

from .fakes import FakeNotifier

T0 = datetime(2026, 10, 18, 14, 30)


def test_save_then_load_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore()
    store.create("!room:a", "call mom", T0)
    store.create("console", "стирка", T0.replace(hour=9, minute=5))

    assert save_store(store, path) is True
    loaded = load_store(path)

    assert loaded.snapshot() == store.snapshot()


def test_file_layout(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    store = TaskStore()
    store.create("!room:a", "call mom", T0)
    save_store(store, path)

    data = json.loads(path.read_text("utf-8"))
    assert data == {
        "Tasks": [
            {"Id": 1, "UserId": "!room:a", "Text": "call mom", "ReminderTime": "2026-10-18T14:30:00"}
        ]
    }


def test_load_accepts_integer_owner_ids(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps({"Tasks": [{"Id": 5, "UserId": 123456789, "Text": "hi", "ReminderTime": "2026-10-18T08:00:00"}]}),
        "utf-8",
    )

    store = load_store(path)

    [task] = store.snapshot()
    assert task.owner == "123456789"
    assert task.remind_at == datetime(2026, 10, 18, 8, 0)
    assert store.next_id == 6


def test_missing_file_gives_empty_store(tmp_path: Path) -> None:
    store = load_store(tmp_path / "nope.json")
    assert store.count() == 0
    assert store.next_id == 1


def test_garbage_file_gives_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text("{not json", "utf-8")
    assert load_store(path).count() == 0


def test_malformed_record_gives_empty_store(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps({"Tasks": [{"Id": 1, "Text": "no owner or time"}]}), "utf-8")
    assert load_store(path).count() == 0


def test_save_creates_parent_and_overwrites(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "tasks.json"
    store = TaskStore()
    task = store.create("a", "x", T0)
    assert save_store(store, path)

    store.remove(task)
    assert save_store(store, path)

    assert json.loads(path.read_text("utf-8")) == {"Tasks": []}
    assert not path.with_suffix(".json.tmp").exists()


def test_save_failure_is_reported_not_raised(tmp_path: Path) -> None:
    # A directory where the file should be makes the final replace fail.
    path = tmp_path / "tasks.json"
    path.mkdir()
    store = TaskStore()
    store.create("a", "x", T0)

    assert save_store(store, path) is False
    assert store.count() == 1


def test_task_file_load_and_save(tmp_path: Path) -> None:
    tf = TaskFile(tmp_path / "tasks.json")
    store = tf.load()
    store.create("a", "x", T0)

    assert tf.save(store)
    assert tf.load().snapshot() == store.snapshot()


@pytest.mark.asyncio
async def test_offset_timestamps_load_as_local_time_and_stay_deliverable(tmp_path: Path) -> None:
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps({"Tasks": [{"Id": 1, "UserId": 42, "Text": "old", "ReminderTime": "2020-01-01T14:30:00+03:00"}]}),
        "utf-8",
    )

    store = load_store(path)

    [old] = store.snapshot()
    expected = datetime(2020, 1, 1, 14, 30, tzinfo=timezone(timedelta(hours=3))).astimezone().replace(tzinfo=None)
    assert old.remind_at.tzinfo is None
    assert old.remind_at == expected

    fresh = store.create("console", "new", datetime.now() - timedelta(minutes=1))
    notifier = FakeNotifier()
    result = await ReminderScheduler(store, notifier).run_cycle()

    assert result.delivered == [old, fresh]
    assert [m.owner for m in notifier.sent] == ["42", "console"]
    assert store.count() == 0
