# tests/test_app.py

from __future__ import annotations

from app import App, Command, CommandKind
from errors import StorageWriteError
from models import ColorClass, SortMode
from storage import Storage
from store import TaskStore

from .helpers import TODAY


def _cmd(kind: CommandKind) -> Command:
    return Command(kind)


def _type(app: App, text: str) -> None:
    for ch in text:
        app.handle(Command.typed(ch))


def test_add_flow_through_commands(store: TaskStore) -> None:
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_ADD))
    assert app.frame().form is not None

    _type(app, "Buy milk")
    app.handle(_cmd(CommandKind.FOCUS_NEXT))
    app.handle(_cmd(CommandKind.FOCUS_NEXT))
    _type(app, "2026-10-16")
    assert app.handle(_cmd(CommandKind.SUBMIT)) is True

    assert app.form is None
    frame = app.frame()
    assert frame.projection.rows[0].task.title == "Buy milk"
    assert frame.projection.rows[0].color is ColorClass.OVERDUE
    assert frame.selected == 0


def test_validation_error_keeps_form_open(store: TaskStore) -> None:
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_ADD))
    app.handle(_cmd(CommandKind.SUBMIT))

    assert app.form is not None
    assert app.status == "Title required."
    assert len(store) == 0


def test_cancel_discards_draft(store: TaskStore) -> None:
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_ADD))
    _type(app, "never mind")
    app.handle(_cmd(CommandKind.CANCEL))

    assert app.form is None
    assert len(store) == 0


def test_quit_inside_form_only_closes_form(store: TaskStore) -> None:
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_ADD))
    assert app.handle(_cmd(CommandKind.QUIT)) is True
    assert app.form is None
    assert app.handle(_cmd(CommandKind.QUIT)) is False


def test_toggle_edit_delete_act_on_selection(store: TaskStore) -> None:
    store.add("first")
    store.add("second")
    app = App(store, today=TODAY)

    app.handle(_cmd(CommandKind.MOVE_UP))  # select "first"
    app.handle(_cmd(CommandKind.TOGGLE))
    assert store.get(1).completed is True

    app.handle(_cmd(CommandKind.START_EDIT))
    assert app.form.edit_id == 1
    _type(app, "!")
    app.handle(_cmd(CommandKind.SUBMIT))
    assert store.get(1).title == "first!"

    app.handle(_cmd(CommandKind.DELETE))
    assert [t.id for t in store.tasks] == [2]
    assert app.status == 'Task "first!" removed.'


def test_list_commands_on_empty_store_are_noops(store: TaskStore) -> None:
    app = App(store, today=TODAY)
    for kind in (CommandKind.MOVE_DOWN, CommandKind.TOGGLE, CommandKind.START_EDIT,
                 CommandKind.DELETE, CommandKind.SUBMIT, CommandKind.BACKSPACE):
        assert app.handle(_cmd(kind)) is True
    assert app.form is None
    assert app.frame().selected is None


def test_set_sort_changes_projection_only(store: TaskStore) -> None:
    store.add("done")
    store.add("open")
    store.toggle(1)
    app = App(store, today=TODAY)

    app.handle(Command.sort(SortMode.COMPLETION))

    frame = app.frame()
    assert frame.projection.sort_mode is SortMode.COMPLETION
    assert [r.task.id for r in frame.projection.rows] == [2, 1]
    assert [t.id for t in store.tasks] == [1, 2]


def test_stale_edit_reports_not_found(store: TaskStore) -> None:
    store.add("ghost")
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_EDIT))
    store.delete(1)

    app.handle(_cmd(CommandKind.SUBMIT))

    assert app.form is None
    assert app.status == "Task id 1 not found."


class BrokenStorage(Storage):
    def save(self, tasks) -> None:
        raise StorageWriteError("read-only filesystem")


def test_write_failure_is_reported_and_state_kept(tmp_path, clock) -> None:
    store = TaskStore(BrokenStorage(tmp_path / "todos.json"), clock=clock)
    app = App(store, today=TODAY)
    app.handle(_cmd(CommandKind.START_ADD))
    _type(app, "unsaved")
    app.handle(_cmd(CommandKind.SUBMIT))

    assert app.form is None
    assert app.status == "Not saved: read-only filesystem"
    assert [t.title for t in store.tasks] == ["unsaved"]


def test_blocked_saves_need_acknowledgement(store: TaskStore) -> None:
    store.save_blocked = True
    app = App(store, today=TODAY, notice="could not read")
    assert app.frame().status == "could not read"

    app.handle(_cmd(CommandKind.START_ADD))
    assert app.form is None
    assert app.status is None
    assert store.save_blocked is False

    app.handle(_cmd(CommandKind.START_ADD))
    _type(app, "ok")
    app.handle(_cmd(CommandKind.SUBMIT))
    assert store.storage.load()[0].title == "ok"
