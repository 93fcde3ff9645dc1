from datetime import datetime, timedelta

from focus_engine.config import EngineSettings
from focus_engine.escalation import DeadlineMonitor, format_time_left, reminder_due
from focus_engine.events import EventBus, EventKind
from focus_engine.schema import Task

NOW = datetime.fromisoformat("2025-04-01T15:00:00")


def test_format_time_left():
    assert format_time_left(1) == "1 minute"
    assert format_time_left(45) == "45 minutes"
    assert format_time_left(60) == "1 hour"
    assert format_time_left(125) == "2 hours and 5 minutes"


def test_reminder_window_uses_task_lead_then_default():
    soon = Task("a", "a", deadline=NOW + timedelta(minutes=20))
    later = Task("b", "b", deadline=NOW + timedelta(minutes=50), notification_minutes=60)
    passed = Task("c", "c", deadline=NOW - timedelta(minutes=1))
    assert reminder_due(soon, NOW, 30) is True
    assert reminder_due(soon, NOW, 10) is False
    assert reminder_due(later, NOW, 30) is True
    assert reminder_due(passed, NOW, 30) is False
    assert reminder_due(Task("d", "d"), NOW, 30) is False


def test_monitor_notifies_once_per_task():
    bus = EventBus()
    events = []
    bus.subscribe(events.append)
    monitor = DeadlineMonitor(bus, EngineSettings())
    tasks = [
        Task("a", "Pay rent", category="personal", deadline=NOW + timedelta(minutes=90)),
        Task("b", "Ship", deadline=NOW + timedelta(minutes=10)),
        Task("c", "Done already", status="completed", deadline=NOW + timedelta(minutes=10)),
    ]
    assert monitor.check(tasks, NOW) == ["b"]
    assert monitor.check(tasks, NOW + timedelta(minutes=1)) == []
    assert monitor.check(tasks, NOW + timedelta(minutes=65)) == ["a"]

    assert [e.kind for e in events] == [EventKind.DEADLINE_APPROACHING] * 2
    assert events[0].payload["minutes_left"] == 10
    assert events[1].payload["message"] == "Pay rent: 25 minutes left"


def test_monitor_respects_notifications_flag():
    settings = EngineSettings(notifications_enabled=False)
    monitor = DeadlineMonitor(EventBus(), settings)
    task = Task("a", "a", deadline=NOW + timedelta(minutes=5))
    assert monitor.check([task], NOW) == []
    settings.update(notifications_enabled=True)
    assert monitor.check([task], NOW) == ["a"]
