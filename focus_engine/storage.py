"""Best-effort persistence of the ledger into an opaque key-value store."""

from __future__ import annotations

import json
import logging
import queue
import threading
from pathlib import Path
from typing import Optional, Protocol

from focus_engine.ledger import PRODUCTIVITY_KEY, PROGRESS_KEY, TIME_SPENT_KEY, Ledger

logger = logging.getLogger(__name__)

LEDGER_KEYS = (TIME_SPENT_KEY, PROGRESS_KEY, PRODUCTIVITY_KEY)


class StorageError(Exception):
    """Raised by a store when it cannot read or write."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """All keys kept in one JSON object on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self.path}") from exc
        if not isinstance(payload, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return payload

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            payload = self._read_all()
        except StorageError:
            logger.warning("Overwriting unreadable store %s", self.path)
            payload = {}
        payload[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}") from exc


def load_ledger(store: Optional[KeyValueStore]) -> Ledger:
    """Load the ledger; missing or malformed keys become empty maps."""

    if store is None:
        return Ledger()
    payload: dict[str, object] = {}
    for key in LEDGER_KEYS:
        try:
            raw = store.get(key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Storage unavailable while loading %s: %s", key, exc)
            continue
        if raw is None:
            continue
        try:
            payload[key] = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed %s entry in store", key)
    try:
        return Ledger.from_dict(payload)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Discarding unreadable ledger payload: %s", exc)
        return Ledger()


def save_ledger(store: Optional[KeyValueStore], ledger: Ledger) -> bool:
    """Write the ledger maps; returns False if any write was skipped."""

    return save_snapshot(store, ledger.to_dict())


def save_snapshot(store: Optional[KeyValueStore], snapshot: dict) -> bool:
    if store is None:
        return False
    ok = True
    for key, value in snapshot.items():
        try:
            store.set(key, json.dumps(value))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Skipping save of %s: %s", key, exc)
            ok = False
    return ok


class LedgerWriter:
    """Writes ledger snapshots to a store from one background thread.

    ``submit`` only enqueues, so callers holding the timer lock never wait on
    the store. Snapshots are written in submission order.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._queue: queue.Queue[Optional[dict]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self) -> None:
        with self._lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name="focus-ledger-writer", daemon=True)
            self._thread.start()

    def submit(self, snapshot: dict) -> None:
        self._queue.put(snapshot)

    def flush(self) -> None:
        """Block until every submitted snapshot has been written."""

        if self._thread is not None:
            self._queue.join()

    def close(self, timeout: Optional[float] = 5.0) -> None:
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is None:
            return
        self._queue.put(None)
        thread.join(timeout)

    def _run(self) -> None:
        while True:
            snapshot = self._queue.get()
            try:
                if snapshot is None:
                    return
                save_snapshot(self.store, snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Ledger write failed")
            finally:
                self._queue.task_done()
