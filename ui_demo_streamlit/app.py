"""Streamlit demo UI for focus-engine."""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from focus_engine.adapters import csv_adapter, json_adapter
from focus_engine.config import COMPLETED_PENALTY_PRESETS
from focus_engine.context import EngineContext
from focus_engine.scheduling import plan_day
from focus_engine.storage import JsonFileStore
from focus_engine.timer import format_clock

DEMO_TASKS = "examples/sample_tasks.json"
DEMO_STORE = "outputs/streamlit_store.json"


def _parse_tasks_from_path(file_path: str) -> list:
    suffix = Path(file_path).suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse(file_path)
    if suffix == ".json":
        return json_adapter.parse(file_path)
    raise ValueError("Unsupported file type. Please use .csv or .json")


def _parse_uploaded(uploaded_file) -> list:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return _parse_tasks_from_path(temp_path)


def _fmt_hour(hour: int) -> str:
    return f"{int(hour):02d}:00"


def run_engine(context: EngineContext, now: datetime) -> dict[str, Any]:
    """Collect every read-side view into a UI-friendly payload."""

    patterns = context.analyze_patterns()
    names = {task.id: task.name for task in context.tasks}
    return {
        "buckets": {
            bucket: [{"task": names.get(r.task_id, r.task_id), "score": r.score} for r in results]
            for bucket, results in context.classify(now).items()
        },
        "peak_hours": [_fmt_hour(hour) for hour in patterns.peak_hours],
        "optimal_duration": patterns.optimal_duration,
        "cold_start": patterns.cold_start,
        "dashboard": context.dashboard(),
        "plan": [
            {"task": block.name, "start": block.start.strftime("%H:%M"), "end": block.end.strftime("%H:%M")}
            for block in plan_day(context.tasks, now, context.settings.work_duration, context.settings.break_duration)
        ],
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Focus Engine Demo", layout="wide")
    st.title("Focus Engine — Streamlit Demo")

    if "context" not in st.session_state:
        st.session_state.context = EngineContext(store=JsonFileStore(DEMO_STORE)).init()
    context: EngineContext = st.session_state.context

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload task list", type=["csv", "json"])
        work = st.slider("Work minutes", min_value=1, max_value=60, value=context.settings.work_duration)
        brk = st.slider("Break minutes", min_value=1, max_value=60, value=context.settings.break_duration)
        preset = st.selectbox("Completed-task penalty", options=["default", "dashboard"], index=0)
        context.update_settings(work_duration=work, break_duration=brk)
        context.settings.scoring.completed_penalty = COMPLETED_PENALTY_PRESETS[preset]

    try:
        tasks = _parse_uploaded(uploaded) if uploaded is not None else json_adapter.parse(DEMO_TASKS)
    except ValueError as exc:
        st.error(f"Input error: {exc}")
        return
    context.set_tasks(tasks)
    now = datetime.now()

    st.subheader("A) Timer")
    task_ids = [task.id for task in tasks]
    selected = st.selectbox("Task", options=task_ids, format_func=lambda tid: context.get_task(tid).name)
    c1, c2, c3, c4, c5, c6 = st.columns(6)
    if c1.button("Start"):
        context.timer.start(selected)
    if c2.button("Pause"):
        context.timer.pause()
    if c3.button("Resume"):
        context.timer.resume()
    if c4.button("Advance 1 min"):
        for _ in range(60):
            context.timer.tick()
    if c5.button("Skip"):
        context.timer.skip()
    progress = c6.number_input("Progress %", min_value=0, max_value=100, value=50)
    if c6.button("Stop & save"):
        context.timer.stop(progress)
    state = context.timer.state
    st.metric(f"{state.mode} ({state.phase})", format_clock(state.remaining_seconds))
    st.progress(context.timer.elapsed_ratio())

    result = run_engine(context, now)

    st.subheader("B) Priority buckets")
    cols = st.columns(4)
    for col, (bucket, rows) in zip(cols, result["buckets"].items()):
        col.write(f"**{bucket}**")
        if rows:
            col.table(rows)
        else:
            col.write("—")

    st.subheader("C) Productivity patterns")
    if result["cold_start"]:
        st.info("No sessions logged yet; suggestions are seeded from task status.")
    st.write("Peak hours:", ", ".join(result["peak_hours"]) or "none")
    st.write(f"Suggested session length: {result['optimal_duration']} minutes")

    st.subheader("D) Dashboard")
    dash = result["dashboard"]
    d1, d2, d3 = st.columns(3)
    d1.metric("Completion rate", f"{dash['tasks']['completion_rate']}%")
    d2.metric("Time tracked", dash["time"]["formatted"])
    d3.metric("Productivity", f"{dash['productivity']}%")

    st.subheader("E) Today's plan")
    st.table(result["plan"])


if __name__ == "__main__":
    main()
