"""Dashboard statistics over tasks and the ledger."""

from __future__ import annotations

from collections import Counter

from focus_engine.ledger import Ledger
from focus_engine.schema import PRIORITIES, Task, round_half_up


def task_stats(tasks: list[Task]) -> dict:
    """Count tasks per status and the completion rate (percent)."""

    counts = Counter(task.status for task in tasks)
    total = len(tasks)
    return {
        "total": total,
        "completed": counts.get("completed", 0),
        "in_progress": counts.get("in_progress", 0),
        "not_started": counts.get("not_started", 0),
        "completion_rate": round_half_up(counts.get("completed", 0) / total * 100) if total else 0,
    }


def format_minutes(minutes: int) -> str:
    hours, rest = divmod(max(0, int(minutes)), 60)
    return f"{hours}h {rest}m"


def time_stats(ledger: Ledger) -> dict:
    """Total tracked minutes across tasks."""

    totals = [ledger.time_spent(task_id).total for task_id in ledger.task_ids()]
    tracked = [total for total in totals if total > 0]
    total_time = sum(tracked)
    return {
        "total_minutes": total_time,
        "formatted": format_minutes(total_time),
        "tracked_tasks": len(tracked),
    }


def overall_productivity(ledger: Ledger) -> int:
    """Rounded mean of per-task productivity averages, 0 without data."""

    averages = [sample.average for _, sample in ledger.productivity_items()]
    if not averages:
        return 0
    return round_half_up(sum(averages) / len(averages))


def priority_stats(tasks: list[Task]) -> dict:
    counts = Counter(task.priority for task in tasks)
    return {priority: counts.get(priority, 0) for priority in reversed(PRIORITIES)}


def subtask_completion(task: Task) -> int:
    if not task.subtasks:
        return 0
    done = sum(1 for subtask in task.subtasks if subtask.completed)
    return round_half_up(done / len(task.subtasks) * 100)


def dashboard(tasks: list[Task], ledger: Ledger) -> dict:
    return {
        "tasks": task_stats(tasks),
        "time": time_stats(ledger),
        "productivity": overall_productivity(ledger),
        "priorities": priority_stats(tasks),
    }
