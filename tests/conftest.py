# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from storage import Storage
from store import TaskStore

from .helpers import FakeClock


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 17, 9, 0, 0))


@pytest.fixture()
def storage(tmp_path: Path) -> Storage:
    return Storage(tmp_path / "todos.json")


@pytest.fixture()
def store(storage: Storage, clock: FakeClock) -> TaskStore:
    return TaskStore(storage, clock=clock)
