"""Field parsing shared by the task file adapters."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from focus_engine.schema import PRIORITIES, STATUSES

REQUIRED_FIELDS = ("id", "name")


def parse_timestamp(value: Any, label: str, field: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"{label}: malformed {field}") from exc


def parse_minutes(value: Any, label: str, field: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{label}: invalid {field}") from exc


def parse_choice(value: Any, choices: tuple[str, ...], default: str, label: str, field: str) -> str:
    if value in (None, ""):
        return default
    normalized = str(value).strip()
    if normalized not in choices:
        raise ValueError(f"{label}: invalid {field} '{normalized}'")
    return normalized


def parse_priority(value: Any, label: str) -> str:
    return parse_choice(value, PRIORITIES, "medium", label, "priority")


def parse_status(value: Any, label: str) -> str:
    return parse_choice(value, STATUSES, "not_started", label, "status")
