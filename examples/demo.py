"""Demo script for focus-engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_engine.adapters.json_adapter import parse
from focus_engine.config import load_settings
from focus_engine.context import EngineContext
from focus_engine.timer import RandomOutcomeSampler


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    now = datetime.fromisoformat("2025-03-10T15:40:00")

    context = EngineContext(settings=load_settings("examples/focus.toml"), sampler=RandomOutcomeSampler(seed=7))
    context.set_tasks(parse("examples/sample_tasks.json"))
    context.init()
    context.bus.subscribe(lambda event: print(f"  event: {event.kind.value} task={event.task_id}"))

    for task_id in ("1", "4", "1"):
        context.timer.start(task_id)
        context.timer.skip()
        context.timer.skip()
    context.timer.start("3")
    for _ in range(12 * 60):
        context.timer.tick()
    context.timer.stop(40, "warm-up only")

    print("Ranking:")
    for bucket, results in context.classify(now).items():
        print(f"  {bucket}: {[(r.task_id, r.score) for r in results]}")
    print("Patterns:", context.analyze_patterns())
    print("Dashboard:", context.dashboard())
    print("Reminders:", context.check_deadlines(now))
    context.dispose()


if __name__ == "__main__":
    main()
