from datetime import datetime

from focus_engine.ledger import Ledger
from focus_engine.patterns import analyze, collect_observations, peak_hours
from focus_engine.schema import Task, TimeEntry


def at(hour):
    return datetime(2025, 2, 10, hour, 15)


def test_cold_start_uses_status_seed_at_creation_hour():
    tasks = [
        Task("a", "done", status="completed", created_at=at(10)),
        Task("b", "doing", status="in_progress", created_at=at(10)),
        Task("c", "todo", status="not_started", created_at=at(10)),
    ]
    report = analyze(tasks, Ledger())
    assert report.cold_start is True
    assert report.hourly == {10: 62}
    assert report.peak_hours == [10]
    assert report.optimal_duration == 25
    assert len(report.suggestions) == 1
    assert report.suggestions[0].average_productivity == 62


def test_empty_everything_gives_empty_report():
    report = analyze([], Ledger())
    assert report.hourly == {}
    assert report.peak_hours == []
    assert report.suggestions == []
    assert report.cold_start is False


def test_hour_resolution_prefers_created_then_deadline_then_fallback():
    tasks = [
        Task("a", "a", created_at=at(8), deadline=at(17)),
        Task("b", "b", deadline=at(17)),
        Task("c", "c"),
    ]
    ledger = Ledger()
    for task_id in ("a", "b", "c"):
        ledger.record_productivity(task_id, 50)
    ledger.record_productivity("c", 50)
    hours = [(obs.task_id, obs.hour) for obs in collect_observations(tasks, ledger)]
    assert hours == [("a", 8), ("b", 17), ("c", 9), ("c", 10)]


def test_peak_hours_top_three_with_insertion_order_ties():
    hourly = {14: 70, 9: 80, 11: 70, 16: 70, 8: 20}
    assert peak_hours(hourly) == [9, 14, 11]
    assert peak_hours({7: 10}) == [7]


def test_peak_hour_count_is_bounded_by_distinct_hours():
    tasks = [Task(str(h), "t", created_at=at(h)) for h in (8, 9)]
    ledger = Ledger()
    for task in tasks:
        ledger.record_productivity(task.id, 75)
    assert len(analyze(tasks, ledger).peak_hours) == 2


def test_optimal_duration_from_productive_sessions():
    tasks = [
        Task("deep", "deep", created_at=at(9)),
        Task("short", "short", created_at=at(15)),
        Task("meh", "meh", created_at=at(20)),
    ]
    ledger = Ledger()
    ledger.record_session("deep", TimeEntry(at(9), 50))
    ledger.record_session("deep", TimeEntry(at(9), 40))
    ledger.record_productivity("deep", 90)
    ledger.record_session("short", TimeEntry(at(15), 25))
    ledger.record_productivity("short", 80)
    ledger.record_session("meh", TimeEntry(at(20), 120))
    ledger.record_productivity("meh", 40)

    report = analyze(tasks, ledger)
    assert report.cold_start is False
    assert report.optimal_duration == 35
    assert report.peak_hours == [9, 15, 20]
    assert [s.suggested_duration_minutes for s in report.suggestions] == [35, 35, 35]
    assert [s.average_productivity for s in report.suggestions] == [90, 80, 40]


def test_analyzer_does_not_mutate_ledger():
    ledger = Ledger()
    ledger.record_productivity("x", 75)
    before = ledger.to_dict()
    analyze([Task("x", "x", created_at=at(11))], ledger)
    assert ledger.to_dict() == before
