"""Engine context: one explicit object owning the timer, ledger and event bus."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from focus_engine import metrics, patterns, scoring
from focus_engine.config import EngineSettings
from focus_engine.escalation import DeadlineMonitor
from focus_engine.events import EventBus, EventKind, TimerEvent
from focus_engine.ledger import Ledger
from focus_engine.patterns import PatternReport
from focus_engine.schema import ScoreResult, Task
from focus_engine.storage import KeyValueStore, LedgerWriter, load_ledger, save_ledger
from focus_engine.timer import FocusTimer, OutcomeSampler, TickDriver

logger = logging.getLogger(__name__)

# Events after which the ledger has changed and is written back to the store.
PERSIST_ON = frozenset({EventKind.WORK_SESSION_COMPLETED, EventKind.TIMER_STOPPED})


class EngineContext:
    """Wires the engine together; several independent contexts may coexist.

    Lifecycle: ``init()`` loads the ledger and starts persisting, ``reset()``
    returns the timer to idle without touching history, ``dispose()`` stops
    the driver, flushes the ledger and drops all subscribers.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        store: Optional[KeyValueStore] = None,
        sampler: Optional[OutcomeSampler] = None,
        clock: Callable[[], datetime] = datetime.now,
        auto_tick: bool = False,
        tick_interval: float = 1.0,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.store = store
        self.bus = EventBus()
        self.ledger = Ledger()
        self._tasks: dict[str, Task] = {}
        self.timer = FocusTimer(
            ledger=self.ledger,
            bus=self.bus,
            settings=self.settings,
            resolve_task=self.get_task,
            sampler=sampler,
            clock=clock,
            driver_factory=(lambda on_tick: TickDriver(on_tick, tick_interval)) if auto_tick else None,
        )
        self.deadlines = DeadlineMonitor(self.bus, self.settings)
        self._writer: Optional[LedgerWriter] = LedgerWriter(store) if store is not None else None
        self._unsubscribe_persist: Optional[Callable[[], None]] = None

    # -------------------- lifecycle --------------------
    def init(self) -> "EngineContext":
        self.ledger.restore(load_ledger(self.store))
        if self._writer is not None:
            self._writer.start()
        if self._unsubscribe_persist is None:
            self._unsubscribe_persist = self.bus.subscribe(self._persist_on_change)
        logger.debug("Engine initialised with %d ledger task(s)", len(self.ledger.task_ids()))
        return self

    def reset(self) -> None:
        self.timer.reinitialize()
        self.deadlines.forget()

    def dispose(self) -> None:
        self.timer.dispose()
        if self._unsubscribe_persist is not None:
            self._unsubscribe_persist()
            self._unsubscribe_persist = None
        if self._writer is not None:
            self._writer.close()
        self.save()
        self.bus.clear()

    def save(self) -> bool:
        return save_ledger(self.store, self.ledger)

    def flush(self) -> None:
        """Wait for queued ledger writes to reach the store."""

        if self._writer is not None:
            self._writer.flush()

    def _persist_on_change(self, event: TimerEvent) -> None:
        # Runs under the timer lock: snapshot in memory, write on the writer thread.
        if event.kind in PERSIST_ON and self._writer is not None:
            self._writer.submit(self.ledger.to_dict())

    # -------------------- inbound --------------------
    def set_tasks(self, tasks: list[Task]) -> None:
        self._tasks = {task.id: task for task in tasks}

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get_task(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def update_settings(self, **changes) -> EngineSettings:
        self.settings.update(**changes)
        return self.settings

    # -------------------- outbound --------------------
    def score(self, task: Task, now: datetime) -> ScoreResult:
        return scoring.score(task, self.ledger, now, self.settings.scoring)

    def classify(self, now: datetime) -> dict[str, list[ScoreResult]]:
        return scoring.classify(self.tasks, self.ledger, now, self.settings.scoring)

    def rank(self, now: datetime) -> list[ScoreResult]:
        return scoring.rank(self.tasks, self.ledger, now, self.settings.scoring)

    def analyze_patterns(self) -> PatternReport:
        return patterns.analyze(self.tasks, self.ledger)

    def dashboard(self) -> dict:
        return metrics.dashboard(self.tasks, self.ledger)

    def check_deadlines(self, now: datetime) -> list[str]:
        return self.deadlines.check(self.tasks, now)
