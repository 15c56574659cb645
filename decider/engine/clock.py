"""Time source for the engine.

All timestamps are naive UTC, matching what the database stores.
"""
from datetime import datetime, timezone

from flask import current_app


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock:
    def now(self) -> datetime:
        return utcnow()


class FrozenClock(Clock):
    """Clock pinned to a fixed instant; ``advance`` moves it forward."""

    def __init__(self, at: datetime):
        self._at = at

    def now(self) -> datetime:
        return self._at

    def set(self, at: datetime) -> None:
        self._at = at

    def advance(self, delta) -> datetime:
        self._at = self._at + delta
        return self._at


def init_clock(app, clock: Clock | None = None) -> None:
    app.extensions["decider_clock"] = clock or Clock()


def get_clock() -> Clock:
    return current_app.extensions["decider_clock"]
