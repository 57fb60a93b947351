"""Scheduling records owned by the test queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable


class EntryState(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"


TestFn = Callable[[], Awaitable[Any]]


@dataclass
class QueueEntry:
    """A queued test: its logic plus the scheduler's bookkeeping."""

    id: str
    name: str
    fn: TestFn
    config: dict = field(default_factory=dict)

    state: EntryState = EntryState.PENDING
    attempts: int = 0
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: float | None = None   # seconds

    result: Any = None
    error: BaseException | None = None

    def mark_running(self):
        self.attempts = 1
        self.state = EntryState.RUNNING
        self.start_time = datetime.now()

    def mark_completed(self):
        self.state = EntryState.COMPLETED
        self.end_time = datetime.now()
        if self.start_time is not None:
            self.duration = round((self.end_time - self.start_time).total_seconds(), 2)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "attempts": self.attempts,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": self.duration,
            "error": str(self.error) if self.error else None,
        }
