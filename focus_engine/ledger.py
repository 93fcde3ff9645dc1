"""Append-only ledger of per-task time, progress and productivity samples."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

import numpy as np

from focus_engine.schema import ProductivitySample, TimeEntry, TimeLedgerRecord, clamp_percent, round_half_up

TIME_SPENT_KEY = "taskTimeSpent"
PROGRESS_KEY = "taskProgress"
PRODUCTIVITY_KEY = "taskProductivity"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _mean(values: list[int]) -> int:
    if not values:
        return 0
    return round_half_up(float(np.mean(values)))


class Ledger:
    """Accumulates what the timer records for each task.

    Writes only ever append (or upsert a progress sample by session id). Read
    accessors never fail: unknown task ids yield empty records.
    """

    def __init__(self) -> None:
        self._time: dict[str, TimeLedgerRecord] = {}
        self._progress: dict[str, dict[str, int]] = {}
        self._productivity: dict[str, ProductivitySample] = {}

    # -------------------- writes --------------------
    def record_session(self, task_id: str, entry: TimeEntry) -> TimeLedgerRecord:
        if entry.duration_minutes < 0:
            entry = TimeEntry(date=entry.date, duration_minutes=0, description=entry.description)
        record = self._time.setdefault(task_id, TimeLedgerRecord())
        record.sessions.append(entry)
        record.total += entry.duration_minutes
        return self.time_spent(task_id)

    def record_progress(self, task_id: str, session_id: str, percent: float) -> None:
        self._progress.setdefault(task_id, {})[session_id] = clamp_percent(percent)

    def record_productivity(self, task_id: str, percent: float) -> ProductivitySample:
        sample = self._productivity.setdefault(task_id, ProductivitySample())
        sample.sessions.append(clamp_percent(percent))
        sample.average = _mean(sample.sessions)
        return self.productivity(task_id)

    def clear(self) -> None:
        self._time.clear()
        self._progress.clear()
        self._productivity.clear()

    def restore(self, other: "Ledger") -> None:
        """Replace this ledger's contents in place with a copy of ``other``."""

        source = other.copy()
        self._time = source._time
        self._progress = source._progress
        self._productivity = source._productivity

    # -------------------- reads --------------------
    def time_spent(self, task_id: str) -> TimeLedgerRecord:
        record = self._time.get(task_id)
        if record is None:
            return TimeLedgerRecord()
        return TimeLedgerRecord(total=record.total, sessions=list(record.sessions))

    def progress(self, task_id: str) -> dict[str, int]:
        return dict(self._progress.get(task_id, {}))

    def productivity(self, task_id: str) -> ProductivitySample:
        sample = self._productivity.get(task_id)
        if sample is None:
            return ProductivitySample()
        return ProductivitySample(sessions=list(sample.sessions), average=sample.average)

    def average_progress(self, task_id: str) -> int:
        return _mean(list(self._progress.get(task_id, {}).values()))

    def task_ids(self) -> list[str]:
        """Every task id with at least one record, in first-seen order."""

        seen: dict[str, None] = {}
        for mapping in (self._time, self._progress, self._productivity):
            for task_id in mapping:
                seen.setdefault(task_id, None)
        return list(seen)

    def productivity_items(self) -> list[tuple[str, ProductivitySample]]:
        return [(task_id, self.productivity(task_id)) for task_id in self._productivity]

    def copy(self) -> "Ledger":
        return Ledger.from_dict(self.to_dict())

    # -------------------- persistence boundary --------------------
    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {
            TIME_SPENT_KEY: {
                task_id: {
                    "total": record.total,
                    "sessions": [
                        {
                            "date": entry.date.isoformat(),
                            "duration": entry.duration_minutes,
                            "description": entry.description,
                        }
                        for entry in record.sessions
                    ],
                }
                for task_id, record in self._time.items()
            },
            PROGRESS_KEY: {task_id: dict(samples) for task_id, samples in self._progress.items()},
            PRODUCTIVITY_KEY: {
                task_id: {"sessions": list(sample.sessions), "average": sample.average}
                for task_id, sample in self._productivity.items()
            },
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "Ledger":
        """Rebuild a ledger, dropping any entry that does not have the expected shape."""

        ledger = cls()
        if not isinstance(payload, dict):
            return ledger

        time_raw = payload.get(TIME_SPENT_KEY)
        if isinstance(time_raw, dict):
            for task_id, raw in time_raw.items():
                if not isinstance(raw, dict) or not isinstance(raw.get("sessions"), list):
                    continue
                for item in raw["sessions"]:
                    entry = _parse_entry(item)
                    if entry is not None:
                        ledger.record_session(str(task_id), entry)

        progress_raw = payload.get(PROGRESS_KEY)
        if isinstance(progress_raw, dict):
            for task_id, samples in progress_raw.items():
                if not isinstance(samples, dict):
                    continue
                for session_id, value in samples.items():
                    if _is_number(value):
                        ledger.record_progress(str(task_id), str(session_id), value)

        productivity_raw = payload.get(PRODUCTIVITY_KEY)
        if isinstance(productivity_raw, dict):
            for task_id, raw in productivity_raw.items():
                if not isinstance(raw, dict) or not isinstance(raw.get("sessions"), list):
                    continue
                for value in raw["sessions"]:
                    if _is_number(value):
                        ledger.record_productivity(str(task_id), value)

        return ledger


def _parse_entry(item: Any) -> TimeEntry | None:
    if not isinstance(item, dict):
        return None
    duration = item.get("duration")
    if not _is_number(duration):
        return None
    try:
        date = datetime.fromisoformat(str(item.get("date")))
    except ValueError:
        return None
    description = item.get("description")
    return TimeEntry(
        date=date,
        duration_minutes=int(duration),
        description=str(description) if description is not None else None,
    )
