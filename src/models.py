"""Data models for the terminal todo list.

Exposes the Task dataclass plus the two small enums the view layer keys
off: the active sort mode and the per-row colour class. Overdue is a
derived property, never a stored field.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class SortMode(Enum):
    CREATED_DATE = "created"
    TARGET_DATE = "target"
    COMPLETION = "completion"

    @property
    def label(self) -> str:
        return SORT_LABELS[self]


SORT_LABELS = {
    SortMode.CREATED_DATE: "Date",
    SortMode.TARGET_DATE: "Target",
    SortMode.COMPLETION: "Status",
}


class ColorClass(Enum):
    NORMAL = "normal"
    OVERDUE = "overdue"
    COMPLETE = "complete"


@dataclass
class Task:
    """A single todo item.

    Fields:
        id: Integer id, unique for the lifetime of the store, never changed.
        title: Short, single-line title (never empty once stored).
        description: Free text; "" means no description.
        target_date: Optional deadline (calendar date, no time component).
        created_at: Timestamp set once when the task is added.
        completed: Flipped only through the store's toggle operation.
    """
    id: int
    title: str
    description: str = ""
    target_date: Optional[date] = None
    created_at: datetime = field(default_factory=datetime.now)
    completed: bool = False

    def is_overdue(self, today: date) -> bool:
        return (not self.completed
                and self.target_date is not None
                and self.target_date < today)

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"Task(id={self.id}, title={self.title!r}, completed={self.completed})"
