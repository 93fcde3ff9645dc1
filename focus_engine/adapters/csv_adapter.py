"""CSV adapter for task lists (subtasks are not representable in CSV)."""

from __future__ import annotations

import csv

from focus_engine.adapters._fields import (
    REQUIRED_FIELDS,
    parse_minutes,
    parse_priority,
    parse_status,
    parse_timestamp,
)
from focus_engine.schema import Task


def _parse_row(row: dict, row_number: int) -> Task:
    label = f"Row {row_number}"
    missing = [field for field in REQUIRED_FIELDS if not row.get(field)]
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")

    category_raw = row.get("category")
    return Task(
        id=row["id"].strip(),
        name=row["name"].strip(),
        priority=parse_priority(row.get("priority"), label),
        category=category_raw.strip() if category_raw else None,
        status=parse_status(row.get("status"), label),
        deadline=parse_timestamp(row.get("deadline"), label, "deadline"),
        created_at=parse_timestamp(row.get("created_at"), label, "created_at"),
        estimated_minutes=parse_minutes(row.get("estimated_minutes"), label, "estimated_minutes"),
        notification_minutes=parse_minutes(row.get("notification_minutes"), label, "notification_minutes"),
    )


def parse(file_path: str) -> list[Task]:
    """Parse a CSV file into tasks."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        tasks: list[Task] = []
        for row_number, row in enumerate(reader, start=2):
            tasks.append(_parse_row(row, row_number))
        return tasks
