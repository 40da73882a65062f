"""Persistence helpers (load/save/quarantine) for the todo list.

The file is a pretty-printed JSON array of task objects. Every save
rewrites the whole file through a temp file + os.replace so a crash
mid-write never truncates the previous good copy. Records written by
older builds (a bare "created_date" and no "description") are migrated
on load.
"""
import json
import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from errors import CorruptDataError, StorageReadError, StorageWriteError
from models import Task

logger = logging.getLogger(__name__)

DEFAULT_FILE = Path('todos.json')

TaskEntry = Dict[str, Any]


class Storage:
    def __init__(self, path: Union[str, Path] = DEFAULT_FILE):
        self.path: Path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> List[Task]:
        """Load every task from disk in persisted order.

        Missing file -> empty list. Anything that does not match the
        schema raises CorruptDataError; no field is coerced.
        """
        if not self.path.exists():
            logger.debug("No task file at %s; starting empty", self.path)
            return []
        try:
            raw_text = self.path.read_text(encoding='utf-8')
        except OSError as exc:
            raise StorageReadError(f"Cannot read {self.path}: {exc}") from exc
        try:
            data = json.loads(raw_text)
        except ValueError as exc:
            raise CorruptDataError(f"{self.path} is not valid JSON: {exc}") from exc
        tasks = decode_tasks(data)
        logger.debug("Loaded %d tasks from %s", len(tasks), self.path)
        return tasks

    def save(self, tasks: Iterable[Task]) -> None:
        """Persist the full collection (pretty-printed, atomic replace)."""
        payload = [encode_task(t) for t in tasks]
        tmp_name: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix='.tmp', dir=str(self.path.parent))
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=4, ensure_ascii=False)
                f.write('\n')
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(f"Cannot write {self.path}: {exc}") from exc
        logger.debug("Saved %d tasks to %s", len(payload), self.path)

    def quarantine(self) -> Path:
        """Move an unreadable file aside so the next save cannot clobber it."""
        stamp = datetime.now().strftime('%Y%m%d-%H%M%S-%f')
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        counter = 1
        # never replace an earlier backup
        while backup.exists():
            backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}-{counter}")
            counter += 1
        try:
            os.replace(self.path, backup)
        except OSError as exc:
            raise StorageWriteError(f"Cannot move {self.path} aside: {exc}") from exc
        logger.warning("Moved unreadable task file %s to %s", self.path, backup)
        return backup


# -------------------- encoding --------------------
def encode_task(task: Task) -> TaskEntry:
    return {
        'id': task.id,
        'title': task.title,
        'description': task.description,
        'target_date': task.target_date.isoformat() if task.target_date else None,
        'created_at': task.created_at.isoformat(),
        'completed': task.completed,
    }


# -------------------- decoding --------------------
def decode_tasks(data: Any) -> List[Task]:
    if not isinstance(data, list):
        raise CorruptDataError(f"Expected a JSON array of tasks, got {type(data).__name__}")
    tasks: List[Task] = []
    seen = set()
    for index, raw in enumerate(data):
        task = decode_task(raw, index)
        if task.id in seen:
            raise CorruptDataError(f"Duplicate task id {task.id} at index {index}")
        seen.add(task.id)
        tasks.append(task)
    return tasks


def decode_task(raw: Any, index: int = 0) -> Task:
    if not isinstance(raw, dict):
        raise CorruptDataError(f"Task #{index} is not an object")
    where = f"Task #{index}"

    tid = raw.get('id')
    # bool is an int subclass; reject it explicitly
    if not isinstance(tid, int) or isinstance(tid, bool):
        raise CorruptDataError(f"{where}: 'id' must be an integer")
    title = _require(raw, 'title', str, where)
    if not title.strip():
        raise CorruptDataError(f"{where}: 'title' is empty")
    description = raw.get('description', '')  # legacy records may omit it
    if not isinstance(description, str):
        raise CorruptDataError(f"{where}: 'description' must be a string")
    completed = _require(raw, 'completed', bool, where)

    target_raw = raw.get('target_date')
    target_date: Optional[date] = None
    if target_raw is not None:
        target_date = _parse_date(target_raw, 'target_date', where)

    if 'created_at' in raw:
        created_raw = raw['created_at']
        if not isinstance(created_raw, str):
            raise CorruptDataError(f"{where}: 'created_at' must be a string")
        try:
            created_at = datetime.fromisoformat(created_raw)
        except ValueError as exc:
            raise CorruptDataError(f"{where}: bad 'created_at' {created_raw!r}") from exc
        # created_at is always a naive local timestamp
        if created_at.tzinfo is not None:
            raise CorruptDataError(f"{where}: 'created_at' must not carry a UTC offset")
    elif 'created_date' in raw:
        # migrate date-only 'created_date' -> midnight 'created_at'
        created_at = datetime.combine(_parse_date(raw['created_date'], 'created_date', where),
                                      datetime.min.time())
    else:
        raise CorruptDataError(f"{where}: missing 'created_at'")

    return Task(id=tid, title=title, description=description, target_date=target_date,
                created_at=created_at, completed=completed)


def _require(raw: TaskEntry, key: str, kind: type, where: str) -> Any:
    if key not in raw:
        raise CorruptDataError(f"{where}: missing '{key}'")
    value = raw[key]
    if not isinstance(value, kind):
        raise CorruptDataError(f"{where}: '{key}' must be {kind.__name__}")
    return value


def _parse_date(value: Any, key: str, where: str) -> date:
    if not isinstance(value, str):
        raise CorruptDataError(f"{where}: '{key}' must be a YYYY-MM-DD string")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise CorruptDataError(f"{where}: bad '{key}' {value!r}") from exc
