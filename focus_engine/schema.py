"""Core data schema for tasks, timer state and ledger records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from math import floor, isnan
from typing import Optional

PRIORITIES = ("low", "medium", "high")
STATUSES = ("not_started", "in_progress", "completed")
MODES = ("work", "break")
BUCKETS = ("urgent", "important", "routine", "optional")


def clamp_percent(value: float) -> int:
    """Clamp a percentage into the closed range 0-100."""

    value = float(value)
    if isnan(value):
        return 0
    return round_half_up(max(0.0, min(100.0, value)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (62.5 -> 63)."""

    return int(floor(float(value) + 0.5))


@dataclass
class Subtask:
    id: str
    name: str
    completed: bool = False


@dataclass
class Task:
    """Task as supplied by the task-management collaborator."""

    id: str
    name: str
    priority: str = "medium"
    category: Optional[str] = None
    status: str = "not_started"
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    subtasks: list[Subtask] = field(default_factory=list)
    estimated_minutes: Optional[int] = None
    notification_minutes: Optional[int] = None


@dataclass(frozen=True)
class TimeEntry:
    """One finished stretch of focused work on a task."""

    date: datetime
    duration_minutes: int
    description: Optional[str] = None


@dataclass
class TimeLedgerRecord:
    total: int = 0
    sessions: list[TimeEntry] = field(default_factory=list)


@dataclass
class ProductivitySample:
    sessions: list[int] = field(default_factory=list)
    average: int = 0


@dataclass
class TimerState:
    """Snapshot of the live work/break cycle."""

    active_task_id: Optional[str] = None
    mode: str = "work"
    remaining_seconds: int = 0
    running: bool = False
    session_count: int = 0

    @property
    def phase(self) -> str:
        if self.running:
            return "running"
        if self.active_task_id is None:
            return "idle"
        return "paused"


@dataclass(frozen=True)
class ScoreResult:
    task_id: str
    score: int
    bucket: str


@dataclass(frozen=True)
class ScheduleSuggestion:
    hour: int
    average_productivity: int
    suggested_duration_minutes: int
