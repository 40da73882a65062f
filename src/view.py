"""Read-only projection of the task list for one render frame.

Nothing in here mutates a Task or reorders the store's list; sorting
always returns a new list. Python's sort is stable, so tasks with equal
keys keep their persisted relative order.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from models import ColorClass, SortMode, Task


def _created_key(task: Task):
    return task.created_at


def _target_key(task: Task):
    # undated tasks go after every dated one
    return (task.target_date is None, task.target_date or date.min, task.created_at)


def _completion_key(task: Task):
    return (task.completed, task.created_at)


SORT_KEYS: Dict[SortMode, Callable[[Task], object]] = {
    SortMode.CREATED_DATE: _created_key,
    SortMode.TARGET_DATE: _target_key,
    SortMode.COMPLETION: _completion_key,
}


def sort_tasks(tasks: Iterable[Task], mode: SortMode) -> List[Task]:
    return sorted(tasks, key=SORT_KEYS[mode])


def color_class(task: Task, today: date) -> ColorClass:
    if task.completed:
        return ColorClass.COMPLETE
    if task.is_overdue(today):
        return ColorClass.OVERDUE
    return ColorClass.NORMAL


def completion_ratio(tasks: Sequence[Task]) -> float:
    if not tasks:
        return 0.0
    return sum(1 for t in tasks if t.completed) / len(tasks)


@dataclass(frozen=True)
class Row:
    task: Task
    color: ColorClass


@dataclass(frozen=True)
class Projection:
    rows: Tuple[Row, ...]
    sort_mode: SortMode
    completed: int
    total: int
    overdue: int
    ratio: float

    def index_of(self, task_id: int) -> int:
        for i, row in enumerate(self.rows):
            if row.task.id == task_id:
                return i
        raise ValueError(task_id)


def project(tasks: Sequence[Task], mode: SortMode, today: date) -> Projection:
    """Build the ordered, coloured rows plus the summary counters."""
    rows = tuple(Row(t, color_class(t, today)) for t in sort_tasks(tasks, mode))
    return Projection(
        rows=rows,
        sort_mode=mode,
        completed=sum(1 for r in rows if r.color is ColorClass.COMPLETE),
        total=len(rows),
        overdue=sum(1 for r in rows if r.color is ColorClass.OVERDUE),
        ratio=completion_ratio(tasks),
    )
