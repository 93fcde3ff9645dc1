"""Deadline reminder rules."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from focus_engine.config import EngineSettings
from focus_engine.events import EventBus, EventKind
from focus_engine.schema import Task


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


def format_time_left(minutes: int) -> str:
    """Human readable remaining time, e.g. '2 hours and 5 minutes'."""

    minutes = max(0, int(minutes))
    hours, rest = divmod(minutes, 60)
    if hours == 0:
        return _plural(minutes, "minute")
    text = _plural(hours, "hour")
    if rest:
        text += f" and {_plural(rest, 'minute')}"
    return text


def reminder_window(task: Task, default_lead_minutes: int) -> Optional[tuple[datetime, datetime]]:
    if task.deadline is None:
        return None
    lead = task.notification_minutes if task.notification_minutes is not None else default_lead_minutes
    return task.deadline - timedelta(minutes=max(0, lead)), task.deadline


def reminder_due(task: Task, now: datetime, default_lead_minutes: int) -> bool:
    """True while ``now`` is inside [deadline - lead, deadline)."""

    window = reminder_window(task, default_lead_minutes)
    if window is None:
        return False
    start, end = window
    return start <= now < end


class DeadlineMonitor:
    """Publishes one ``deadlineApproaching`` event per task entering its reminder window."""

    def __init__(self, bus: EventBus, settings: EngineSettings) -> None:
        self.bus = bus
        self.settings = settings
        self._notified: set[str] = set()

    def check(self, tasks: list[Task], now: datetime) -> list[str]:
        if not self.settings.notifications_enabled:
            return []
        notified: list[str] = []
        for task in tasks:
            if task.id in self._notified or task.status == "completed":
                continue
            if not reminder_due(task, now, self.settings.notification_lead_minutes):
                continue
            minutes_left = int(round((task.deadline - now).total_seconds() / 60))
            self.bus.emit(
                EventKind.DEADLINE_APPROACHING,
                task.id,
                name=task.name,
                category=task.category,
                minutes_left=minutes_left,
                message=f"{task.name}: {format_time_left(minutes_left)} left",
            )
            self._notified.add(task.id)
            notified.append(task.id)
        return notified

    def forget(self, task_id: Optional[str] = None) -> None:
        if task_id is None:
            self._notified.clear()
        else:
            self._notified.discard(task_id)
