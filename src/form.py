"""Transient add/edit form: draft field values plus a focus cursor.

The draft never touches the store until submit(); cancelling is simply
dropping the TaskForm object.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from errors import ValidationError
from models import Task
from store import TaskStore

DATE_FORMAT_HINT = "YYYY-MM-DD"


class FormField(Enum):
    TITLE = 0
    DESCRIPTION = 1
    TARGET_DATE = 2

    @property
    def label(self) -> str:
        return FIELD_LABELS[self]


FIELD_LABELS = {
    FormField.TITLE: "Title",
    FormField.DESCRIPTION: "Description",
    FormField.TARGET_DATE: f"Target Date ({DATE_FORMAT_HINT})",
}
FIELD_ORDER = tuple(FormField)


class FormMode(Enum):
    ADD = "add"
    EDIT = "edit"


@dataclass
class TaskForm:
    mode: FormMode = FormMode.ADD
    edit_id: Optional[int] = None
    title: str = ""
    description: str = ""
    target_date: str = ""
    focus: FormField = FormField.TITLE

    @classmethod
    def for_add(cls) -> "TaskForm":
        return cls()

    @classmethod
    def for_edit(cls, task: Task) -> "TaskForm":
        return cls(
            mode=FormMode.EDIT,
            edit_id=task.id,
            title=task.title,
            description=task.description,
            target_date=task.target_date.isoformat() if task.target_date else "",
        )

    @property
    def heading(self) -> str:
        return "Add New Task" if self.mode is FormMode.ADD else "Edit Task"

    # -------------------- focus --------------------
    def focus_next(self) -> None:
        idx = FIELD_ORDER.index(self.focus)
        self.focus = FIELD_ORDER[(idx + 1) % len(FIELD_ORDER)]

    def focus_prev(self) -> None:
        idx = FIELD_ORDER.index(self.focus)
        self.focus = FIELD_ORDER[(idx - 1) % len(FIELD_ORDER)]

    # -------------------- editing --------------------
    def value(self, field: FormField) -> str:
        return getattr(self, _ATTRS[field])

    def _set(self, field: FormField, text: str) -> None:
        setattr(self, _ATTRS[field], text)

    def type_char(self, ch: str) -> None:
        self._set(self.focus, self.value(self.focus) + ch)

    def backspace(self) -> None:
        self._set(self.focus, self.value(self.focus)[:-1])

    # -------------------- submit --------------------
    def parse_target_date(self) -> Optional[date]:
        raw = self.target_date.strip()
        if not raw:
            return None
        try:
            return date.fromisoformat(raw)
        except ValueError:
            raise ValidationError(
                f"Invalid target date {raw!r}; use {DATE_FORMAT_HINT}.", field="target_date"
            ) from None

    def submit(self, store: TaskStore) -> int:
        """Apply the draft as an add or edit; returns the affected task id.

        Raises ValidationError (draft left untouched so the form can stay
        open), NotFoundError for a stale edit id, or StorageWriteError
        when the change was applied but could not be saved.
        """
        if not self.title.strip():
            self.focus = FormField.TITLE
            raise ValidationError("Title required.", field="title")
        try:
            target = self.parse_target_date()
        except ValidationError:
            self.focus = FormField.TARGET_DATE
            raise
        if self.mode is FormMode.ADD:
            return store.add(self.title, self.description, target)
        if self.edit_id is None:
            raise ValidationError("No task selected for editing.", field="id")
        store.edit(self.edit_id, self.title, self.description, target)
        return self.edit_id


_ATTRS = {
    FormField.TITLE: "title",
    FormField.DESCRIPTION: "description",
    FormField.TARGET_DATE: "target_date",
}
