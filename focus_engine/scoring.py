"""Additive urgency/importance scoring and bucket classification."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from focus_engine.config import ScoringWeights
from focus_engine.ledger import Ledger
from focus_engine.schema import BUCKETS, ScoreResult, Task

BUCKET_THRESHOLDS = (("urgent", 70), ("important", 50), ("routine", 30))


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole calendar days from ``now`` to ``deadline`` (negative when overdue)."""

    return (deadline.date() - now.date()).days


def deadline_points(deadline: Optional[datetime], now: datetime, weights: ScoringWeights) -> int:
    if deadline is None:
        return 0
    days = days_until(deadline, now)
    if days < 0:
        return weights.overdue
    if days == 0:
        return weights.due_today
    if days <= 1:
        return weights.due_tomorrow
    if days <= 3:
        return weights.due_within_3_days
    if days <= 7:
        return weights.due_within_week
    return weights.due_later


def bucket_for(score: int) -> str:
    for bucket, threshold in BUCKET_THRESHOLDS:
        if score >= threshold:
            return bucket
    return "optional"


def score_components(task: Task, ledger: Ledger, now: datetime, weights: Optional[ScoringWeights] = None) -> dict:
    """Break a task's score into its additive parts."""

    weights = weights or ScoringWeights()

    status = 0
    if task.status == "in_progress":
        status = weights.in_progress_bonus
    elif task.status == "completed":
        status = weights.completed_penalty

    average = ledger.productivity(task.id).average
    productivity = 0
    if average > 70:
        productivity = weights.high_productivity_bonus
    elif average > 50:
        productivity = weights.medium_productivity_bonus

    time_invested = 0
    if ledger.time_spent(task.id).total > weights.time_invested_threshold_minutes:
        time_invested = weights.time_invested_bonus

    return {
        "priority": weights.priority.get(task.priority, 0),
        "deadline": deadline_points(task.deadline, now, weights),
        "status": status,
        "productivity": productivity,
        "time_invested": time_invested,
    }


def score(task: Task, ledger: Ledger, now: datetime, weights: Optional[ScoringWeights] = None) -> ScoreResult:
    total = int(sum(score_components(task, ledger, now, weights).values()))
    return ScoreResult(task_id=task.id, score=total, bucket=bucket_for(total))


def classify(
    tasks: list[Task],
    ledger: Ledger,
    now: datetime,
    weights: Optional[ScoringWeights] = None,
) -> dict[str, list[ScoreResult]]:
    """Partition tasks into buckets, each sorted by descending score.

    Equal scores keep the input order.
    """

    buckets: dict[str, list[ScoreResult]] = {bucket: [] for bucket in BUCKETS}
    for task in tasks:
        result = score(task, ledger, now, weights)
        buckets[result.bucket].append(result)
    return {bucket: sorted(results, key=lambda r: -r.score) for bucket, results in buckets.items()}


def rank(
    tasks: list[Task],
    ledger: Ledger,
    now: datetime,
    weights: Optional[ScoringWeights] = None,
) -> list[ScoreResult]:
    results = [score(task, ledger, now, weights) for task in tasks]
    return sorted(results, key=lambda r: -r.score)
