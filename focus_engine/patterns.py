"""Peak-hour and session-length inference from productivity history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from focus_engine.ledger import Ledger
from focus_engine.schema import ScheduleSuggestion, Task, round_half_up

DEFAULT_SESSION_MINUTES = 25
FALLBACK_START_HOUR = 9
PEAK_HOUR_COUNT = 3
HIGH_PRODUCTIVITY = 70
COLD_START_PRODUCTIVITY = {"completed": 85, "in_progress": 60}
COLD_START_DEFAULT = 40


@dataclass(frozen=True)
class Observation:
    """A productivity sample resolved to an hour of day."""

    task_id: str
    hour: int
    weekday: int
    productivity: int
    session_minutes: Optional[float]
    task: Optional[Task] = None


@dataclass
class PatternReport:
    hourly: dict[int, int] = field(default_factory=dict)
    peak_hours: list[int] = field(default_factory=list)
    optimal_duration: int = DEFAULT_SESSION_MINUTES
    suggestions: list[ScheduleSuggestion] = field(default_factory=list)
    cold_start: bool = False


def _anchor(task: Optional[Task]):
    if task is None:
        return None
    return task.created_at or task.deadline


def _session_minutes(ledger: Ledger, task_id: str) -> Optional[float]:
    record = ledger.time_spent(task_id)
    if not record.sessions:
        return None
    return record.total / len(record.sessions)


def collect_observations(tasks: list[Task], ledger: Ledger) -> list[Observation]:
    """Resolve every recorded productivity sample to an hour key."""

    by_id = {task.id: task for task in tasks}
    observations: list[Observation] = []
    for task_id, sample in ledger.productivity_items():
        task = by_id.get(task_id)
        anchor = _anchor(task)
        minutes = _session_minutes(ledger, task_id)
        for index, value in enumerate(sample.sessions):
            if anchor is not None:
                hour, weekday = anchor.hour, anchor.weekday()
            else:
                hour, weekday = (FALLBACK_START_HOUR + index) % 24, 0
            observations.append(Observation(task_id, hour, weekday, value, minutes, task))
    return observations


def cold_start_observations(tasks: list[Task], ledger: Ledger) -> list[Observation]:
    """Synthetic samples from task status, used before any session has been logged."""

    observations: list[Observation] = []
    for index, task in enumerate(tasks):
        anchor = _anchor(task)
        if anchor is not None:
            hour, weekday = anchor.hour, anchor.weekday()
        else:
            hour, weekday = (FALLBACK_START_HOUR + index) % 24, 0
        value = COLD_START_PRODUCTIVITY.get(task.status, COLD_START_DEFAULT)
        observations.append(Observation(task.id, hour, weekday, value, _session_minutes(ledger, task.id), task))
    return observations


def hourly_means(observations: list[Observation]) -> dict[int, int]:
    """Mean productivity per hour, keyed in first-seen order."""

    histogram: dict[int, list[int]] = {}
    for obs in observations:
        histogram.setdefault(obs.hour, []).append(obs.productivity)
    return {hour: round_half_up(float(np.mean(values))) for hour, values in histogram.items()}


def peak_hours(hourly: dict[int, int], count: int = PEAK_HOUR_COUNT) -> list[int]:
    ranked = sorted(hourly.items(), key=lambda item: -item[1])
    return [hour for hour, _ in ranked[:count]]


def optimal_duration(observations: list[Observation]) -> int:
    lengths = [
        obs.session_minutes
        for obs in observations
        if obs.productivity > HIGH_PRODUCTIVITY and obs.session_minutes is not None
    ]
    if not lengths:
        return DEFAULT_SESSION_MINUTES
    return round_half_up(float(np.mean(lengths)))


def analyze(tasks: list[Task], ledger: Ledger) -> PatternReport:
    """Compute peak hours, ideal session length and a suggested schedule."""

    observations = collect_observations(tasks, ledger)
    cold_start = False
    if not observations and tasks:
        observations = cold_start_observations(tasks, ledger)
        cold_start = True

    hourly = hourly_means(observations)
    peaks = peak_hours(hourly)
    duration = optimal_duration(observations)
    suggestions = [
        ScheduleSuggestion(hour=hour, average_productivity=hourly[hour], suggested_duration_minutes=duration)
        for hour in peaks
    ]
    return PatternReport(
        hourly=hourly,
        peak_hours=peaks,
        optimal_duration=duration,
        suggestions=suggestions,
        cold_start=cold_start,
    )
