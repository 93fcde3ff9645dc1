"""Run the session-outcome benchmark and insights from a task list and saved ledger."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_engine.adapters import csv_adapter, json_adapter
from focus_engine.ml_pipeline import benchmark_models, build_training_table
from focus_engine.patterns import analyze
from focus_engine.scoring import rank
from focus_engine.storage import JsonFileStore, load_ledger


def _load_tasks(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return csv_adapter.parse(str(path))
    if suffix == ".json":
        return json_adapter.parse(str(path))
    raise ValueError("Unsupported input format, expected .csv or .json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run focus-engine insights and ML benchmark")
    parser.add_argument("--tasks", required=True, help="Path to CSV/JSON task list")
    parser.add_argument("--ledger", required=True, help="Path to the JSON store holding the ledger")
    parser.add_argument("--now", default=None, help="ISO timestamp used for scoring (default: current time)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    tasks = _load_tasks(Path(args.tasks))
    ledger = load_ledger(JsonFileStore(args.ledger))
    now = datetime.fromisoformat(args.now) if args.now else datetime.now()

    X, y, feature_names = build_training_table(tasks, ledger)
    report = benchmark_models(X, y, seed=42)
    report["feature_names"] = feature_names
    report["n_samples"] = int(len(y))

    patterns = analyze(tasks, ledger)
    report["task_ranking"] = [{"task_id": r.task_id, "score": r.score, "bucket": r.bucket} for r in rank(tasks, ledger, now)]
    report["peak_hours"] = patterns.peak_hours
    report["optimal_duration"] = patterns.optimal_duration

    print(json.dumps(report, indent=2))

    outputs_dir = Path("outputs")
    outputs_dir.mkdir(parents=True, exist_ok=True)
    out_path = outputs_dir / "benchmark_report.json"
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"Saved benchmark report to {out_path}")


if __name__ == "__main__":
    main()
