"""JSON adapter for task lists."""

from __future__ import annotations

import json

from focus_engine.adapters._fields import (
    REQUIRED_FIELDS,
    parse_minutes,
    parse_priority,
    parse_status,
    parse_timestamp,
)
from focus_engine.schema import Subtask, Task


def _parse_subtasks(raw, label: str) -> list[Subtask]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise ValueError(f"{label}: subtasks must be a list")
    subtasks = []
    for position, item in enumerate(raw, start=1):
        if not isinstance(item, dict) or not item.get("name"):
            raise ValueError(f"{label}: subtask {position} needs a name")
        subtasks.append(
            Subtask(
                id=str(item.get("id") or position),
                name=str(item["name"]).strip(),
                completed=bool(item.get("completed", False)),
            )
        )
    return subtasks


def _parse_item(item: dict, index: int) -> Task:
    label = f"Item {index}"
    if not isinstance(item, dict):
        raise ValueError(f"{label}: expected an object")
    missing = [field for field in REQUIRED_FIELDS if not item.get(field)]
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")

    category_raw = item.get("category")
    return Task(
        id=str(item["id"]).strip(),
        name=str(item["name"]).strip(),
        priority=parse_priority(item.get("priority"), label),
        category=str(category_raw).strip() if category_raw else None,
        status=parse_status(item.get("status"), label),
        deadline=parse_timestamp(item.get("deadline"), label, "deadline"),
        created_at=parse_timestamp(item.get("created_at", item.get("createdAt")), label, "created_at"),
        subtasks=_parse_subtasks(item.get("subtasks"), label),
        estimated_minutes=parse_minutes(item.get("estimated_minutes", item.get("duration")), label, "estimated_minutes"),
        notification_minutes=parse_minutes(
            item.get("notification_minutes", item.get("notificationTime")), label, "notification_minutes"
        ),
    )


def parse(file_path: str) -> list[Task]:
    """Parse a JSON file holding a list of task objects."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")

    return [_parse_item(item, i) for i, item in enumerate(payload, start=1)]
