from datetime import datetime

from focus_engine.ledger import Ledger
from focus_engine.schema import TimeEntry, round_half_up

DAY = datetime.fromisoformat("2025-01-06T09:00:00")


def test_total_tracks_sum_of_sessions():
    ledger = Ledger()
    for minutes in (25, 25, 10, 0, 7):
        ledger.record_session("a", TimeEntry(DAY, minutes))
    record = ledger.time_spent("a")
    assert record.total == sum(entry.duration_minutes for entry in record.sessions) == 67
    assert len(record.sessions) == 5


def test_negative_duration_is_clamped():
    ledger = Ledger()
    ledger.record_session("a", TimeEntry(DAY, -5, "oops"))
    record = ledger.time_spent("a")
    assert record.total == 0
    assert record.sessions[0].description == "oops"


def test_productivity_average_is_rounded_mean():
    ledger = Ledger()
    values = [60, 75, 100, 62, 91]
    for index, value in enumerate(values, start=1):
        sample = ledger.record_productivity("a", value)
        expected = round_half_up(sum(values[:index]) / index)
        assert sample.average == expected
        assert 0 <= sample.average <= 100


def test_productivity_rounds_half_up():
    ledger = Ledger()
    ledger.record_productivity("a", 62)
    ledger.record_productivity("a", 63)
    assert ledger.productivity("a").average == 63


def test_percentages_are_clamped():
    ledger = Ledger()
    ledger.record_progress("a", "s1", 140)
    ledger.record_progress("a", "s2", -3)
    ledger.record_productivity("a", 250)
    assert ledger.progress("a") == {"s1": 100, "s2": 0}
    assert ledger.productivity("a").sessions == [100]


def test_progress_upserts_by_session_in_insertion_order():
    ledger = Ledger()
    ledger.record_progress("a", "s1", 10)
    ledger.record_progress("a", "s2", 20)
    ledger.record_progress("a", "s1", 30)
    assert list(ledger.progress("a").items()) == [("s1", 30), ("s2", 20)]
    assert ledger.average_progress("a") == 25


def test_unknown_task_reads_return_defaults():
    ledger = Ledger()
    assert ledger.time_spent("nope").total == 0
    assert ledger.time_spent("nope").sessions == []
    assert ledger.progress("nope") == {}
    assert ledger.productivity("nope").average == 0
    assert ledger.average_progress("nope") == 0


def test_accessors_return_copies():
    ledger = Ledger()
    ledger.record_session("a", TimeEntry(DAY, 25))
    ledger.time_spent("a").sessions.clear()
    ledger.progress("a")["x"] = 1
    assert len(ledger.time_spent("a").sessions) == 1
    assert ledger.progress("a") == {}


def test_round_trip_through_dict_and_malformed_entries():
    ledger = Ledger()
    ledger.record_session("a", TimeEntry(DAY, 25, "focus"))
    ledger.record_progress("a", "s1", 80)
    ledger.record_productivity("a", 70)
    restored = Ledger.from_dict(ledger.to_dict())
    assert restored.to_dict() == ledger.to_dict()

    broken = Ledger.from_dict(
        {
            "taskTimeSpent": {"a": 12, "b": {"total": 99, "sessions": [{"date": "bad", "duration": 5}]}},
            "taskProgress": [],
            "taskProductivity": {"c": {"sessions": [50, "x", 70]}},
        }
    )
    assert broken.time_spent("a").total == 0
    assert broken.time_spent("b").total == 0
    assert broken.productivity("c").sessions == [50, 70]
    assert broken.productivity("c").average == 60


def test_restore_replaces_contents_in_place():
    target = Ledger()
    target.record_productivity("old", 10)
    source = Ledger()
    source.record_session("new", TimeEntry(DAY, 30))
    target.restore(source)
    assert target.task_ids() == ["new"]
    source.record_session("new", TimeEntry(DAY, 30))
    assert target.time_spent("new").total == 30


def test_non_finite_percentages_are_clamped():
    ledger = Ledger()
    assert ledger.record_productivity("t1", float("nan")).sessions == [0]
    assert ledger.record_productivity("t1", float("inf")).sessions == [0, 100]
    ledger.record_progress("t1", "s1", float("-inf"))
    assert ledger.progress("t1") == {"s1": 0}
