from datetime import datetime

from focus_engine.ledger import Ledger
from focus_engine.metrics import dashboard, format_minutes, overall_productivity, subtask_completion, task_stats
from focus_engine.schema import Subtask, Task, TimeEntry

DAY = datetime.fromisoformat("2025-01-01T09:00:00")


def test_task_and_priority_stats():
    tasks = [
        Task("a", "a", priority="high", status="completed"),
        Task("b", "b", priority="high", status="in_progress"),
        Task("c", "c", priority="low"),
    ]
    stats = task_stats(tasks)
    assert stats == {"total": 3, "completed": 1, "in_progress": 1, "not_started": 1, "completion_rate": 33}
    assert task_stats([])["completion_rate"] == 0
    assert dashboard(tasks, Ledger())["priorities"] == {"high": 2, "medium": 0, "low": 1}


def test_time_and_productivity_summary():
    ledger = Ledger()
    ledger.record_session("a", TimeEntry(DAY, 50))
    ledger.record_session("b", TimeEntry(DAY, 25))
    ledger.record_productivity("a", 80)
    ledger.record_productivity("b", 65)
    summary = dashboard([], ledger)
    assert summary["time"] == {"total_minutes": 75, "formatted": "1h 15m", "tracked_tasks": 2}
    assert summary["productivity"] == 73
    assert overall_productivity(Ledger()) == 0
    assert format_minutes(5) == "0h 5m"


def test_subtask_completion():
    task = Task("a", "a", subtasks=[Subtask("1", "x", True), Subtask("2", "y"), Subtask("3", "z")])
    assert subtask_completion(task) == 33
    assert subtask_completion(Task("b", "b")) == 0
