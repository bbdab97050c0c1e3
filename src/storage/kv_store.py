# src/storage/kv_store.py

"""Key-value stores holding the tracker's persistent state."""

import copy
import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any

from src.config.settings import Settings

logger = logging.getLogger("price_watch.store")

ChangeListener = Callable[[set[str]], None]

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS kv (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


class KeyValueStore(ABC):
    """JSON-valued store with change notifications.

    Listeners registered with :meth:`on_change` are called after every
    :meth:`set` with the set of keys that changed.  A failing listener
    is logged and never breaks the write.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    def on_change(self, callback: ChangeListener) -> None:
        """Register *callback* to receive the keys of every write."""
        self._listeners.append(callback)

    def _notify(self, keys: set[str]) -> None:
        for listener in list(self._listeners):
            try:
                listener(set(keys))
            except Exception:
                logger.error(
                    "Store change listener failed for keys %s",
                    sorted(keys),
                    exc_info=True,
                )

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None``."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* and notify listeners."""
        ...

    def close(self) -> None:
        """Release underlying resources (no-op by default)."""


class MemoryStore(KeyValueStore):
    """In-process store, handy for tests and dry runs."""

    def __init__(self) -> None:
        super().__init__()
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
        self._notify({key})


class SqliteStore(KeyValueStore):
    """SQLite-backed store; each key holds one JSON document."""

    def __init__(self, db_path: Path | None = None) -> None:
        super().__init__()
        path = db_path or Settings.STORE_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            str(path), check_same_thread=False,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        logger.debug("SqliteStore opened at %s", path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def get(self, key: str) -> Any | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT value FROM kv WHERE key = ?", (key,),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row[0])

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._conn.execute(
                "INSERT INTO kv (key, value, updated_at) "
                "VALUES (?, ?, datetime('now')) "
                "ON CONFLICT(key) DO UPDATE SET "
                "value=excluded.value, updated_at=excluded.updated_at",
                (key, payload),
            )
            self._conn.commit()
        self._notify({key})
