# tests/helpers.py

from __future__ import annotations

from datetime import date, datetime, timedelta

TODAY = date(2026, 10, 17)


class FakeClock:
    """Deterministic clock: each call returns the current time, then steps one minute."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current
