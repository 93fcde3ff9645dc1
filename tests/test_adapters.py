import json

import pytest

from focus_engine.adapters.csv_adapter import parse as parse_csv
from focus_engine.adapters.json_adapter import parse as parse_json


def test_csv_parse_success(tmp_path):
    path = tmp_path / "tasks.csv"
    path.write_text(
        "id,name,priority,category,status,deadline,created_at,estimated_minutes\n"
        "a,Write report,high,work,in_progress,2025-01-03T17:00:00,2025-01-01T09:00:00,50\n"
        "b,Groceries,,shopping,,,,\n",
        encoding="utf-8",
    )
    tasks = parse_csv(str(path))
    assert len(tasks) == 2
    assert tasks[0].priority == "high"
    assert tasks[0].deadline.hour == 17
    assert tasks[0].estimated_minutes == 50
    assert tasks[1].priority == "medium"
    assert tasks[1].status == "not_started"
    assert tasks[1].deadline is None


def test_csv_parse_invalid_row(tmp_path):
    path = tmp_path / "tasks.csv"
    path.write_text("id,name,status\na,Report,someday\n", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_csv(str(path))


def test_json_parse_success_with_subtasks(tmp_path):
    path = tmp_path / "tasks.json"
    payload = [
        {
            "id": "1",
            "name": "Build UI",
            "priority": "high",
            "createdAt": "2025-01-01T10:00:00",
            "notificationTime": "30",
            "subtasks": [{"id": "s1", "name": "wireframe", "completed": True}, {"name": "styles"}],
        },
        {"id": "2", "name": "Run", "status": "completed", "deadline": "2025-01-02T07:00:00"},
    ]
    path.write_text(json.dumps(payload), encoding="utf-8")
    tasks = parse_json(str(path))
    assert len(tasks) == 2
    assert tasks[0].created_at.hour == 10
    assert tasks[0].notification_minutes == 30
    assert [s.completed for s in tasks[0].subtasks] == [True, False]
    assert tasks[1].status == "completed"


def test_json_parse_malformed(tmp_path):
    path = tmp_path / "tasks.json"
    path.write_text(json.dumps([{"id": "a", "name": "x", "deadline": "bad"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        parse_json(str(path))

    path.write_text(json.dumps({"id": "a"}), encoding="utf-8")
    with pytest.raises(ValueError):
        parse_json(str(path))
