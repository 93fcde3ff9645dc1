"""Typed lifecycle events and a synchronous in-memory pub/sub bus."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    TIMER_STARTED = "timerStarted"
    TIMER_PAUSED = "timerPaused"
    TIMER_RESUMED = "timerResumed"
    TIMER_RESET = "timerReset"
    TIMER_SKIPPED = "timerSkipped"
    WORK_SESSION_COMPLETED = "workSessionCompleted"
    BREAK_SESSION_COMPLETED = "breakSessionCompleted"
    TIMER_STOPPED = "timerStopped"
    DEADLINE_APPROACHING = "deadlineApproaching"


@dataclass(frozen=True)
class TimerEvent:
    """A lifecycle event: the kind tag plus its payload."""

    kind: EventKind
    task_id: Optional[str]
    payload: dict[str, Any] = field(default_factory=dict)
    ts: datetime = field(default_factory=datetime.now)


EventHandler = Callable[[TimerEvent], Any]


class EventBus:
    """Fan-out of engine events to registered handlers.

    Dispatch is synchronous. A handler that raises is logged and skipped; the
    remaining handlers still receive the event.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []
        self.events_published = 0

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            self.unsubscribe(handler)

        return _unsubscribe

    def unsubscribe(self, handler: EventHandler) -> None:
        with contextlib.suppress(ValueError):
            self._handlers.remove(handler)

    def clear(self) -> None:
        self._handlers.clear()

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def publish(self, event: TimerEvent) -> TimerEvent:
        self.events_published += 1
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:  # noqa: BLE001
                logger.exception("Event handler %r failed on %s", handler, event.kind.value)
        return event

    def emit(self, kind: EventKind, task_id: Optional[str], **payload: Any) -> TimerEvent:
        return self.publish(TimerEvent(kind=kind, task_id=task_id, payload=payload))
