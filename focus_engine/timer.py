"""Focus/break timer state machine."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Protocol

import numpy as np

from focus_engine.config import EngineSettings
from focus_engine.events import EventBus, EventKind
from focus_engine.ledger import Ledger
from focus_engine.schema import Task, TimeEntry, TimerState, clamp_percent

logger = logging.getLogger(__name__)

TaskResolver = Callable[[str], Optional[Task]]


def format_clock(seconds: int) -> str:
    """Render seconds as MM:SS."""

    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{secs:02d}"


def new_session_id() -> str:
    stamp = int(time.time() * 1000)
    token = secrets.token_hex(4)
    return f"session-{stamp}-{token}"


class OutcomeSampler(Protocol):
    """Source of the progress/productivity values logged when a work session completes."""

    def progress(self) -> int: ...

    def productivity(self) -> int: ...


class RandomOutcomeSampler:
    """Placeholder outcome estimate: uniform draws, progress 70-100 and productivity 60-100."""

    PROGRESS_RANGE = (70, 100)
    PRODUCTIVITY_RANGE = (60, 100)

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = np.random.default_rng(seed)

    def progress(self) -> int:
        low, high = self.PROGRESS_RANGE
        return int(self._rng.integers(low, high + 1))

    def productivity(self) -> int:
        low, high = self.PRODUCTIVITY_RANGE
        return int(self._rng.integers(low, high + 1))


@dataclass
class FixedOutcomeSampler:
    progress_value: int = 80
    productivity_value: int = 75

    def progress(self) -> int:
        return self.progress_value

    def productivity(self) -> int:
        return self.productivity_value


class TickDriver:
    """Calls ``on_tick`` once per interval from a daemon thread until cancelled."""

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0) -> None:
        self._on_tick = on_tick
        self._interval = interval
        self._halted = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._halted.is_set()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, name="focus-timer-tick", daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._halted.set()

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join(timeout)

    def _run(self) -> None:
        while not self._halted.wait(self._interval):
            try:
                self._on_tick()
            except Exception:  # noqa: BLE001
                logger.exception("Timer tick failed")


DriverFactory = Callable[[Callable[[], None]], TickDriver]


class FocusTimer:
    """Work/break cycle for the active task.

    Every public operation runs under one lock, so ledger writes have a single
    writer. When a driver factory is supplied the timer ticks itself; every
    halt bumps a generation counter before touching state, which drops any
    tick still in flight from the halted driver.
    """

    def __init__(
        self,
        ledger: Ledger,
        bus: EventBus,
        settings: EngineSettings,
        resolve_task: TaskResolver,
        sampler: Optional[OutcomeSampler] = None,
        clock: Callable[[], datetime] = datetime.now,
        driver_factory: Optional[DriverFactory] = None,
    ) -> None:
        self.ledger = ledger
        self.bus = bus
        self.settings = settings
        self.sampler: OutcomeSampler = sampler or RandomOutcomeSampler()
        self._resolve_task = resolve_task
        self._clock = clock
        self._driver_factory = driver_factory
        self._driver: Optional[TickDriver] = None
        self._generation = 0
        self._lock = threading.RLock()
        self._busy = False
        self._state = TimerState(remaining_seconds=self._duration_seconds("work"))

    @property
    def state(self) -> TimerState:
        with self._lock:
            return replace(self._state)

    def _duration_seconds(self, mode: str) -> int:
        minutes = self.settings.work_duration if mode == "work" else self.settings.break_duration
        return int(minutes) * 60

    def elapsed_ratio(self) -> float:
        """Fraction of the current mode already elapsed, 0.0-1.0."""

        with self._lock:
            total = self._duration_seconds(self._state.mode)
            if total <= 0:
                return 0.0
            return max(0.0, min(1.0, (total - self._state.remaining_seconds) / total))

    # -------------------- driver --------------------
    def _run_driver(self) -> None:
        if self._driver_factory is None or self._driver is not None:
            return
        generation = self._generation
        self._driver = self._driver_factory(lambda: self._driven_tick(generation))
        self._driver.start()

    def _halt_driver(self) -> None:
        self._generation += 1
        if self._driver is not None:
            self._driver.cancel()
            self._driver = None

    def _driven_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self.tick()

    # -------------------- transitions --------------------
    def start(self, task_id: str) -> bool:
        """Begin a work session on a known task; unknown ids leave the timer untouched."""

        task = self._resolve_task(task_id)
        if task is None:
            logger.debug("Refusing to start timer for unknown task %r", task_id)
            return False
        return self._begin(task.id)

    def restart(self, task: Optional[Task]) -> bool:
        if task is None or self._resolve_task(task.id) is None:
            logger.debug("Refusing to restart timer for unknown task")
            return False
        return self._begin(task.id)

    def _begin(self, task_id: str) -> bool:
        with self._lock:
            self._halt_driver()
            self._state.active_task_id = task_id
            self._state.mode = "work"
            self._state.remaining_seconds = self._duration_seconds("work")
            self._state.running = True
            self._run_driver()
            logger.debug("Timer started for task %s", task_id)
            self.bus.emit(EventKind.TIMER_STARTED, task_id, seconds=self._state.remaining_seconds)
        return True

    def pause(self) -> bool:
        with self._lock:
            if not self._state.running:
                return False
            self._halt_driver()
            self._state.running = False
            self.bus.emit(EventKind.TIMER_PAUSED, self._state.active_task_id, mode=self._state.mode)
        return True

    def resume(self) -> bool:
        with self._lock:
            if self._state.running or self._state.active_task_id is None:
                return False
            self._state.running = True
            self._run_driver()
            self.bus.emit(EventKind.TIMER_RESUMED, self._state.active_task_id, mode=self._state.mode)
        return True

    def tick(self) -> None:
        with self._lock:
            if self._busy or not self._state.running:
                return
            self._busy = True
            try:
                if self._state.remaining_seconds > 0:
                    self._state.remaining_seconds -= 1
                if self._state.remaining_seconds == 0:
                    self._complete()
            finally:
                self._busy = False

    def skip(self) -> None:
        with self._lock:
            if self._busy:
                return
            self._busy = True
            try:
                self.bus.emit(EventKind.TIMER_SKIPPED, self._state.active_task_id, mode=self._state.mode)
                self._complete()
            finally:
                self._busy = False

    def _complete(self) -> None:
        task_id = self._state.active_task_id
        if self._state.mode == "work":
            minutes = self.settings.work_duration
            if task_id is not None:
                self._record_work_session(task_id, minutes)
            self._state.mode = "break"
            self._state.remaining_seconds = self._duration_seconds("break")
            self._state.running = True
            self._run_driver()
            logger.debug("Work session completed for task %s", task_id)
            self.bus.emit(
                EventKind.WORK_SESSION_COMPLETED,
                task_id,
                minutes=minutes,
                session_count=self._state.session_count,
            )
        else:
            self._halt_driver()
            self._state.mode = "work"
            self._state.remaining_seconds = self._duration_seconds("work")
            self._state.running = False
            logger.debug("Break completed for task %s", task_id)
            self.bus.emit(EventKind.BREAK_SESSION_COMPLETED, task_id)

    def _record_work_session(self, task_id: str, minutes: int) -> None:
        session_id = new_session_id()
        self.ledger.record_session(task_id, TimeEntry(date=self._clock(), duration_minutes=minutes))
        self.ledger.record_progress(task_id, session_id, self.sampler.progress())
        self.ledger.record_productivity(task_id, self.sampler.productivity())
        self._state.session_count += 1

    def reset(self) -> None:
        with self._lock:
            self._halt_driver()
            self._state.remaining_seconds = self._duration_seconds(self._state.mode)
            self._state.running = False
            self.bus.emit(EventKind.TIMER_RESET, self._state.active_task_id, mode=self._state.mode)

    def stop(self, progress_percent: float, description: Optional[str] = None) -> bool:
        """End the engagement early, logging the elapsed work minutes and the given progress."""

        with self._lock:
            task_id = self._state.active_task_id
            if task_id is None:
                return False
            progress = clamp_percent(progress_percent)
            self._halt_driver()
            elapsed = 0
            if self._state.mode == "work":
                elapsed = max(0, (self._duration_seconds("work") - self._state.remaining_seconds) // 60)
            if elapsed > 0:
                self.ledger.record_session(
                    task_id,
                    TimeEntry(date=self._clock(), duration_minutes=elapsed, description=description),
                )
            self.ledger.record_progress(task_id, new_session_id(), progress)
            self._state = TimerState(
                remaining_seconds=self._duration_seconds("work"),
                session_count=self._state.session_count,
            )
            self.bus.emit(EventKind.TIMER_STOPPED, task_id, minutes=elapsed, progress=progress)
        return True

    def reinitialize(self) -> None:
        """Drop the live cycle entirely: idle, work mode, session count zero."""

        with self._lock:
            self._halt_driver()
            self._state = TimerState(remaining_seconds=self._duration_seconds("work"))

    def dispose(self, timeout: Optional[float] = 1.0) -> None:
        """Halt the driver and wait for its thread to leave any in-flight tick."""

        with self._lock:
            driver = self._driver
            self._halt_driver()
            self._state.running = False
        if driver is not None:
            driver.join(timeout)
