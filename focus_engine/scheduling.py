"""Lay open tasks out as pomodoro blocks inside productive hours."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from math import ceil

from focus_engine.schema import Task

PRODUCTIVE_WINDOWS = ((9, 12), (14, 18))
_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}


@dataclass(frozen=True)
class PlannedBlock:
    task_id: str
    name: str
    start: datetime
    end: datetime
    estimated_minutes: int
    priority: str
    status: str


def pomodoro_minutes(estimated_minutes: int, work_minutes: int = 25, break_minutes: int = 5) -> int:
    """Wall-clock minutes needed once the estimate is split into work+break blocks."""

    blocks = ceil(max(1, estimated_minutes) / work_minutes)
    return blocks * (work_minutes + break_minutes)


def next_productive_time(moment: datetime, windows=PRODUCTIVE_WINDOWS) -> datetime:
    for start, end in windows:
        if start <= moment.hour < end:
            return moment
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    for start, _ in windows:
        if moment.hour < start:
            return day + timedelta(hours=start)
    return day + timedelta(days=1, hours=windows[0][0])


def _order_key(task: Task):
    # Epoch seconds compare across naive and aware deadlines; missing deadlines sort last.
    deadline = task.deadline.timestamp() if task.deadline is not None else 0.0
    return _PRIORITY_ORDER.get(task.priority, len(_PRIORITY_ORDER)), task.deadline is None, deadline


def plan_day(
    tasks: list[Task],
    now: datetime,
    work_minutes: int = 25,
    break_minutes: int = 5,
    windows=PRODUCTIVE_WINDOWS,
) -> list[PlannedBlock]:
    """Schedule every non-completed task, highest priority and earliest deadline first."""

    day_start = now.replace(hour=windows[0][0], minute=0, second=0, microsecond=0)
    current = max(day_start, now.replace(second=0, microsecond=0))

    plan: list[PlannedBlock] = []
    for task in sorted((t for t in tasks if t.status != "completed"), key=_order_key):
        estimate = task.estimated_minutes or work_minutes
        current = next_productive_time(current, windows)
        end = current + timedelta(minutes=pomodoro_minutes(estimate, work_minutes, break_minutes))
        plan.append(
            PlannedBlock(
                task_id=task.id,
                name=task.name,
                start=current,
                end=end,
                estimated_minutes=estimate,
                priority=task.priority,
                status=task.status,
            )
        )
        current = end
    return plan
