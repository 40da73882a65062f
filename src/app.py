"""Command handling: the read -> mutate -> persist step of the main loop.

App sits between the input side (cli.py decodes keys into Command
values) and the renderer (render.py draws App.frame()). It never lets a
TodoError escape; every failure becomes a one-line status message.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from enum import Enum, auto
from typing import Optional
import logging

from errors import NotFoundError, StorageWriteError, ValidationError
from form import TaskForm
from models import SortMode
from store import TaskStore
from view import Projection

logger = logging.getLogger(__name__)


class CommandKind(Enum):
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    TOGGLE = auto()
    START_ADD = auto()
    START_EDIT = auto()
    DELETE = auto()
    SET_SORT = auto()
    FOCUS_NEXT = auto()
    FOCUS_PREV = auto()
    TYPE_CHAR = auto()
    BACKSPACE = auto()
    SUBMIT = auto()
    CANCEL = auto()
    QUIT = auto()


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    sort_mode: Optional[SortMode] = None
    char: str = ""

    @classmethod
    def sort(cls, mode: SortMode) -> "Command":
        return cls(CommandKind.SET_SORT, sort_mode=mode)

    @classmethod
    def typed(cls, ch: str) -> "Command":
        return cls(CommandKind.TYPE_CHAR, char=ch)


@dataclass(frozen=True)
class Frame:
    """Everything the renderer needs for one redraw."""
    projection: Projection
    selected: Optional[int]
    form: Optional[TaskForm]
    status: Optional[str]


class App:
    def __init__(self, store: TaskStore, today: Optional[date] = None,
                 notice: Optional[str] = None):
        self.store: TaskStore = store
        self.form: Optional[TaskForm] = None
        self.status: Optional[str] = notice
        self._today = today

    def frame(self) -> Frame:
        return Frame(
            projection=self.store.view(self._today),
            selected=self.store.selected,
            form=self.form,
            status=self.status,
        )

    def handle(self, cmd: Command) -> bool:
        """Apply one command. Returns False only when the session should end."""
        if self.store.save_blocked and cmd.kind is not CommandKind.QUIT:
            # first key after a read failure only acknowledges the notice
            self.store.unblock_saves()
            self.status = None
            return True
        self.status = None
        try:
            if self.form is not None:
                return self._handle_form(self.form, cmd)
            return self._handle_list(cmd)
        except ValidationError as exc:
            logger.info("Rejected input: %s", exc)
            self.status = str(exc)
        except NotFoundError as exc:
            logger.info("Stale task reference: %s", exc)
            self.form = None
            self.status = str(exc)
        except StorageWriteError as exc:
            # change is kept in memory; the next successful save catches up
            self.form = None
            self.status = f"Not saved: {exc}"
        return True

    # -------------------- list mode --------------------
    def _handle_list(self, cmd: Command) -> bool:
        kind = cmd.kind
        store = self.store
        if kind is CommandKind.QUIT:
            return False
        if kind is CommandKind.MOVE_UP:
            store.select_prev()
        elif kind is CommandKind.MOVE_DOWN:
            store.select_next()
        elif kind is CommandKind.SET_SORT and cmd.sort_mode is not None:
            store.set_sort_mode(cmd.sort_mode)
        elif kind is CommandKind.START_ADD:
            self.form = TaskForm.for_add()
        elif kind in (CommandKind.TOGGLE, CommandKind.START_EDIT, CommandKind.DELETE):
            task = store.selected_task()
            if task is None:
                return True
            if kind is CommandKind.TOGGLE:
                store.toggle(task.id)
            elif kind is CommandKind.START_EDIT:
                self.form = TaskForm.for_edit(task)
            else:
                store.delete(task.id)
                self.status = f'Task "{task.title}" removed.'
        return True

    # -------------------- form mode --------------------
    def _handle_form(self, form: TaskForm, cmd: Command) -> bool:
        kind = cmd.kind
        if kind in (CommandKind.CANCEL, CommandKind.QUIT):
            self.form = None
        elif kind is CommandKind.FOCUS_NEXT:
            form.focus_next()
        elif kind is CommandKind.FOCUS_PREV:
            form.focus_prev()
        elif kind is CommandKind.TYPE_CHAR:
            form.type_char(cmd.char)
        elif kind is CommandKind.BACKSPACE:
            form.backspace()
        elif kind is CommandKind.SUBMIT:
            form.submit(self.store)
            self.form = None
        return True
