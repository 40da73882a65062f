"""Task store: owns the in-memory list, id allocation, selection and flushing.

Persisted order is insertion order. Display order comes from view.project
and the highlighted row is an index into that displayed sequence.
Every mutation is applied in memory first and then flushed; a failed
flush propagates StorageWriteError but the mutation stays.
"""
import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, Tuple

from errors import (CorruptDataError, NotFoundError, StorageReadError, StorageWriteError,
                    ValidationError)
from models import SortMode, Task
from storage import Storage
from view import Projection, project

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TaskStore:
    def __init__(self, storage: Storage, tasks: Optional[Iterable[Task]] = None,
                 clock: Optional[Clock] = None):
        self.storage: Storage = storage
        self._tasks: List[Task] = list(tasks or [])
        self._clock: Clock = clock or datetime.now
        self._next_id: int = max((t.id for t in self._tasks), default=0) + 1
        self.sort_mode: SortMode = SortMode.CREATED_DATE
        self.selected: Optional[int] = 0 if self._tasks else None
        self.dirty: bool = False
        self.save_blocked: bool = False

    # -------------------- id management --------------------
    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    # -------------------- queries --------------------
    @property
    def tasks(self) -> Tuple[Task, ...]:
        return tuple(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFoundError(task_id)

    def today(self) -> date:
        return self._clock().date()

    def view(self, today: Optional[date] = None) -> Projection:
        return project(self._tasks, self.sort_mode, today or self.today())

    # -------------------- task operations --------------------
    def add(self, title: str, description: Optional[str] = "",
            target_date: Optional[date] = None) -> int:
        title = _clean_title(title)
        task = Task(
            id=self._allocate_id(),
            title=title,
            description=(description or "").strip(),
            target_date=target_date,
            created_at=self._clock(),
        )
        self._tasks.append(task)
        self._select_task(task.id)
        logger.info("Added task %d %r", task.id, task.title)
        self._flush()
        return task.id

    def edit(self, task_id: int, title: str, description: Optional[str],
             target_date: Optional[date]) -> None:
        task = self.get(task_id)
        title = _clean_title(title)
        task.title = title
        task.description = (description or "").strip()
        task.target_date = target_date
        self._select_task(task_id)
        logger.info("Edited task %d", task_id)
        self._flush()

    def toggle(self, task_id: int) -> None:
        task = self.get(task_id)
        task.completed = not task.completed
        self._select_task(task_id)
        logger.info("Task %d completed=%s", task_id, task.completed)
        self._flush()

    def delete(self, task_id: int) -> None:
        task = self.get(task_id)
        self._tasks.remove(task)
        if not self._tasks:
            self.selected = None
        elif self.selected is not None and self.selected >= len(self._tasks):
            self.selected = len(self._tasks) - 1
        logger.info("Deleted task %d", task_id)
        self._flush()

    # -------------------- sort mode --------------------
    def set_sort_mode(self, mode: SortMode) -> None:
        """Switch display order, keeping the highlighted task highlighted."""
        current = self.selected_task()
        self.sort_mode = mode
        if current is not None:
            self._select_task(current.id)

    # -------------------- selection --------------------
    def select_next(self) -> None:
        if not self._tasks:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = (self.selected + 1) % len(self._tasks)

    def select_prev(self) -> None:
        if not self._tasks:
            return
        if self.selected is None:
            self.selected = 0
        elif self.selected == 0:
            self.selected = len(self._tasks) - 1
        else:
            self.selected -= 1

    def selected_task(self) -> Optional[Task]:
        if self.selected is None or not self._tasks:
            return None
        rows = self.view().rows
        return rows[min(self.selected, len(rows) - 1)].task

    def _select_task(self, task_id: int) -> None:
        self.selected = self.view().index_of(task_id)

    # -------------------- persistence --------------------
    def _flush(self) -> None:
        if self.save_blocked:
            self.dirty = True
            raise StorageWriteError(
                f"Saving to {self.storage.path} is paused until the read error is acknowledged")
        try:
            self.storage.save(self._tasks)
        except StorageWriteError:
            self.dirty = True
            logger.error("Flush to %s failed; keeping in-memory changes", self.storage.path,
                         exc_info=True)
            raise
        self.dirty = False

    def unblock_saves(self) -> None:
        self.save_blocked = False


def _clean_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title required.", field="title")
    return title


def open_store(storage: Storage, clock: Optional[Clock] = None) -> Tuple[TaskStore, Optional[str]]:
    """Build the session store from disk.

    Returns the store plus an optional notice for the status line. A
    corrupt file is moved aside (never overwritten); an unreadable one
    leaves saving paused so the next flush cannot replace it.
    """
    try:
        tasks = storage.load()
    except CorruptDataError as exc:
        logger.warning("Task file is corrupt: %s", exc)
        try:
            backup = storage.quarantine()
        except StorageWriteError as move_exc:
            logger.error("Could not quarantine corrupt file: %s", move_exc)
            store = TaskStore(storage, clock=clock)
            store.save_blocked = True
            return store, (f"{storage.path} is unreadable and could not be moved aside; "
                           "saving is paused (press any key to resume).")
        return TaskStore(storage, clock=clock), (
            f"{storage.path} was unreadable; moved to {backup.name}. Starting empty.")
    except StorageReadError as exc:
        logger.warning("Task file could not be read: %s", exc)
        store = TaskStore(storage, clock=clock)
        store.save_blocked = True
        return store, f"{exc}. Saving is paused (press any key to resume)."
    return TaskStore(storage, tasks, clock=clock), None
