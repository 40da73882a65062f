# tests/test_store.py

from __future__ import annotations

import random
from datetime import date

import pytest

from errors import NotFoundError, StorageWriteError, ValidationError
from models import ColorClass, SortMode
from storage import Storage
from store import TaskStore, open_store

from .helpers import TODAY


def test_add_appends_incomplete_task_and_persists(store: TaskStore, storage: Storage) -> None:
    tid = store.add("Buy milk", "", None)

    assert len(store) == 1
    task = store.get(tid)
    assert task.completed is False
    assert task.target_date is None
    assert [t.id for t in storage.load()] == [tid]


def test_add_rejects_empty_title_without_mutating(store: TaskStore, storage: Storage) -> None:
    with pytest.raises(ValidationError) as excinfo:
        store.add("   ")
    assert excinfo.value.field == "title"
    assert len(store) == 0
    assert not storage.exists()


def test_buy_milk_scenario(store: TaskStore) -> None:
    tid = store.add("Buy milk", "", None)
    store.toggle(tid)
    assert store.get(tid).completed is True
    assert store.view(TODAY).rows[0].color is ColorClass.COMPLETE

    store.delete(tid)
    assert len(store) == 0
    assert store.selected is None


def test_overdue_task_becomes_complete_when_toggled(store: TaskStore) -> None:
    yesterday = date(2026, 10, 16)
    tid = store.add("File taxes", target_date=yesterday)
    assert store.view(TODAY).rows[0].color is ColorClass.OVERDUE

    store.toggle(tid)
    assert store.get(tid).target_date == yesterday
    assert store.view(TODAY).rows[0].color is ColorClass.COMPLETE


def test_edit_keeps_identity_fields(store: TaskStore) -> None:
    tid = store.add("Draft", "old")
    store.toggle(tid)
    before = store.get(tid)
    created = before.created_at

    store.edit(tid, "Final", "new", date(2026, 12, 1))

    task = store.get(tid)
    assert (task.id, task.created_at, task.completed) == (tid, created, True)
    assert (task.title, task.description, task.target_date) == ("Final", "new", date(2026, 12, 1))


def test_edit_validation_and_missing_id(store: TaskStore) -> None:
    tid = store.add("Keep me")
    with pytest.raises(ValidationError):
        store.edit(tid, "", "", None)
    assert store.get(tid).title == "Keep me"
    with pytest.raises(NotFoundError):
        store.edit(999, "x", "", None)


def test_deleted_id_is_gone_for_every_operation(store: TaskStore) -> None:
    tid = store.add("Temporary")
    store.delete(tid)

    with pytest.raises(NotFoundError):
        store.get(tid)
    with pytest.raises(NotFoundError):
        store.toggle(tid)
    with pytest.raises(NotFoundError):
        store.edit(tid, "again", "", None)
    with pytest.raises(NotFoundError):
        store.delete(tid)


def test_ids_are_not_reused_after_delete(store: TaskStore) -> None:
    first = store.add("one")
    second = store.add("two")
    store.delete(second)
    third = store.add("three")
    assert third not in (first, second)


def test_random_operation_sequences_keep_ids_unique_and_created_at_fixed(store: TaskStore) -> None:
    rng = random.Random(1234)
    created = {}
    for step in range(200):
        ids = [t.id for t in store.tasks]
        op = rng.choice(["add", "add", "edit", "toggle", "delete"])
        if op == "add" or not ids:
            tid = store.add(f"task {step}")
            assert tid not in created
            created[tid] = store.get(tid).created_at
            continue
        tid = rng.choice(ids)
        if op == "edit":
            store.edit(tid, f"edited {step}", "d", None)
        elif op == "toggle":
            store.toggle(tid)
        else:
            store.delete(tid)
        ids = [t.id for t in store.tasks]
        assert len(ids) == len(set(ids))
        for task in store.tasks:
            assert task.created_at == created[task.id]


def test_selection_wraps_and_clamps_on_delete(store: TaskStore) -> None:
    a = store.add("a")
    store.add("b")
    c = store.add("c")
    assert store.selected == 2  # newly added task is highlighted

    store.select_next()
    assert store.selected == 0
    store.select_prev()
    assert store.selected == 2

    store.delete(c)
    assert store.selected == 1
    store.select_prev()
    store.select_prev()
    assert store.selected_task().id == store.tasks[1].id
    store.delete(a)
    assert store.selected == 0


def test_selection_is_undefined_when_empty(store: TaskStore) -> None:
    store.select_next()
    store.select_prev()
    assert store.selected is None
    assert store.selected_task() is None


def test_sort_mode_change_keeps_highlighted_task(store: TaskStore) -> None:
    first = store.add("no deadline")
    store.add("due soon", target_date=date(2026, 10, 20))
    store.select_next()  # wrap to "no deadline"
    assert store.selected_task().id == first

    store.set_sort_mode(SortMode.TARGET_DATE)
    assert store.selected == 1
    assert store.selected_task().id == first
    assert [t.id for t in store.tasks] == [1, 2]  # persisted order untouched


def test_toggle_in_completion_mode_follows_task(store: TaskStore) -> None:
    a = store.add("a")
    store.add("b")
    store.set_sort_mode(SortMode.COMPLETION)
    store.select_next()
    assert store.selected_task().id == a

    store.toggle(a)
    assert store.selected_task().id == a
    assert store.selected == 1


class FailingStorage(Storage):
    def save(self, tasks) -> None:
        raise StorageWriteError("disk full")


def test_failed_flush_keeps_in_memory_mutation(tmp_path, clock) -> None:
    store = TaskStore(FailingStorage(tmp_path / "todos.json"), clock=clock)

    with pytest.raises(StorageWriteError):
        store.add("still here")

    assert [t.title for t in store.tasks] == ["still here"]
    assert store.dirty is True


def test_open_store_missing_file_is_empty(storage: Storage) -> None:
    store, notice = open_store(storage)
    assert len(store) == 0
    assert notice is None


def test_open_store_continues_ids_after_reload(store: TaskStore, storage: Storage, clock) -> None:
    store.add("one")
    store.add("two")

    reloaded, _ = open_store(storage, clock=clock)
    assert reloaded.selected == 0
    assert reloaded.add("three") == 3


def test_open_store_quarantines_corrupt_file(storage: Storage, clock) -> None:
    storage.path.write_text("{ not json", encoding="utf-8")

    store, notice = open_store(storage, clock=clock)

    assert len(store) == 0
    assert notice is not None and "moved to" in notice
    backups = list(storage.path.parent.glob("todos.json.corrupt-*"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "{ not json"

    store.add("fresh start")
    assert backups[0].read_text(encoding="utf-8") == "{ not json"


def test_missing_description_is_stored_empty(store: TaskStore) -> None:
    tid = store.add("Buy milk", None, None)
    assert store.get(tid).description == ""

    store.edit(tid, "Buy oat milk", None, None)
    assert store.get(tid).description == ""


def test_open_store_rejects_timezone_aware_timestamps(storage: Storage, clock) -> None:
    storage.path.write_text(
        '[{"id": 1, "title": "a", "created_at": "2026-10-01T00:00:00+00:00", "completed": false},'
        ' {"id": 2, "title": "b", "created_at": "2026-10-02T00:00:00", "completed": false}]',
        encoding="utf-8",
    )

    store, notice = open_store(storage, clock=clock)

    assert len(store) == 0
    assert notice is not None and "moved to" in notice
    assert store.view(TODAY).total == 0
