# tests/test_task_store.py

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

from tasktracker.tasks.task_models import ReminderTask
from tasktracker.tasks.task_store import TaskStore

T0 = datetime(2026, 10, 18, 14, 30)


def test_create_then_list_returns_exactly_that_task() -> None:
    store = TaskStore()
    task = store.create("!room:a", "call mom", T0)

    assert store.list_for_owner("!room:a") == [task]
    assert task.id == 1
    assert task.text == "call mom"
    assert task.remind_at == T0


def test_create_truncates_to_minute_and_strips_text() -> None:
    store = TaskStore()
    task = store.create("u1", "  water plants ", T0.replace(second=42, microsecond=7))
    assert task.remind_at == T0
    assert task.text == "water plants"


def test_list_is_owner_scoped() -> None:
    store = TaskStore()
    a = store.create("a", "one", T0)
    store.create("b", "two", T0)
    a2 = store.create("a", "three", T0 + timedelta(hours=1))

    assert store.list_for_owner("a") == [a, a2]
    assert store.list_for_owner("nobody") == []


def test_delete_by_other_owner_has_no_effect() -> None:
    store = TaskStore()
    task = store.create("a", "secret", T0)

    assert store.delete("b", task.id) is False
    assert store.list_for_owner("a") == [task]

    assert store.delete("a", task.id) is True
    assert store.list_for_owner("a") == []
    assert store.delete("a", task.id) is False


def test_ids_are_not_reused_after_delete() -> None:
    store = TaskStore()
    store.create("a", "1", T0)
    store.create("a", "2", T0)
    store.create("a", "3", T0)

    assert store.delete("a", 2)
    new = store.create("a", "4", T0)

    assert new.id == 4
    ids = [t.id for t in store.snapshot()]
    assert len(ids) == len(set(ids))


def test_counter_continues_after_loaded_tasks() -> None:
    loaded = [
        ReminderTask(id=3, owner="a", text="x", remind_at=T0),
        ReminderTask(id=7, owner="b", text="y", remind_at=T0),
    ]
    store = TaskStore(loaded)
    assert store.next_id == 8
    assert store.create("a", "z", T0).id == 8


def test_due_before_is_inclusive_and_never_returns_later_tasks() -> None:
    store = TaskStore()
    early = store.create("a", "early", T0 - timedelta(minutes=1))
    exact = store.create("b", "exact", T0)
    store.create("a", "late", T0 + timedelta(minutes=1))

    due = store.due_before(T0)

    assert due == [early, exact]
    assert all(t.remind_at <= T0 for t in due)
    # Read-only: nothing removed.
    assert store.count() == 3


def test_remove_specific_task() -> None:
    store = TaskStore()
    task = store.create("a", "x", T0)

    assert store.remove(task) is True
    assert store.remove(task) is False
    assert store.count() == 0


def test_snapshot_is_a_copy() -> None:
    store = TaskStore()
    store.create("a", "x", T0)
    snap = store.snapshot()
    snap.clear()
    assert store.count() == 1


def test_concurrent_creates_never_produce_duplicate_ids() -> None:
    store = TaskStore()
    n_threads, per_thread = 8, 200
    barrier = threading.Barrier(n_threads)

    def worker() -> None:
        barrier.wait()
        for i in range(per_thread):
            store.create("same-owner", f"task {i}", T0)

    threads = [threading.Thread(target=worker) for _ in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    ids = [t.id for t in store.list_for_owner("same-owner")]
    assert len(ids) == n_threads * per_thread
    assert len(set(ids)) == len(ids)


def test_create_with_offset_time_stores_naive_local_time() -> None:
    store = TaskStore()
    aware = datetime(2026, 10, 18, 14, 30, tzinfo=timezone.utc)
    task = store.create("a", "x", aware)

    assert task.remind_at.tzinfo is None
    assert task.remind_at == aware.astimezone().replace(tzinfo=None)
    assert store.due_before(datetime(2030, 1, 1)) == [task]
