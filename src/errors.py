"""Error kinds raised by the store, storage and form layers.

None of these are fatal to a running session; the App turns them into a
status line and carries on.
"""
from typing import Optional


class TodoError(Exception):
    """Base class for every error this application raises on purpose."""


class ValidationError(TodoError, ValueError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(TodoError, KeyError):
    def __init__(self, task_id: int):
        super().__init__(task_id)
        self.task_id = task_id

    def __str__(self) -> str:
        return f"Task id {self.task_id} not found."


class CorruptDataError(TodoError):
    """The persisted file exists but does not match the task schema."""


class StorageError(TodoError, OSError):
    pass


class StorageReadError(StorageError):
    pass


class StorageWriteError(StorageError):
    """A save did not happen; in-memory state is still authoritative."""
