"""Result cache — key → (value, expiry) with pluggable backends.

Values are JSON strings so that nothing but plain data is ever read back
from a backend. Two backends ship: an in-process dict and a SQLite table for
sharing a cache between worker processes.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class CacheBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl: float) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryCacheBackend:
    """Thread-safe in-process cache."""

    def __init__(self, clock: Clock = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl: float) -> None:
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class SQLiteCacheBackend:
    """SQLite-backed cache, shareable between processes on one host."""

    def __init__(self, db_path: Path, clock: Clock = time.time) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
        return self._conn

    def _init_db(self) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    expires_at REAL NOT NULL
                );
            """)
            conn.commit()

    def get(self, key: str) -> str | None:
        with self._lock:
            row = self._get_conn().execute(
                "SELECT value, expires_at FROM cache_entries WHERE key = ?", (key,),
            ).fetchone()
            if row is None:
                return None
            if self._clock() >= row["expires_at"]:
                conn = self._get_conn()
                conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
                conn.commit()
                return None
            return row["value"]

    def set(self, key: str, value: str, ttl: float) -> None:
        if ttl <= 0:
            return
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                "INSERT OR REPLACE INTO cache_entries (key, value, expires_at) VALUES (?, ?, ?)",
                (key, value, self._clock() + ttl),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
            conn.commit()

    def clear(self) -> None:
        with self._lock:
            conn = self._get_conn()
            conn.execute("DELETE FROM cache_entries")
            conn.commit()

    def purge_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""
        with self._lock:
            conn = self._get_conn()
            cursor = conn.execute(
                "DELETE FROM cache_entries WHERE expires_at <= ?", (self._clock(),),
            )
            conn.commit()
            return cursor.rowcount

    def close(self) -> None:
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None


class SingleFlight:
    """Per-key locks so only one caller recomputes a missing cache entry."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


def create_backend(kind: str, db_path: str | Path | None = None) -> CacheBackend:
    """Build a backend from its configured name."""
    if kind == "memory":
        return MemoryCacheBackend()
    if kind == "sqlite":
        if not db_path:
            raise ValueError("SQLite cache backend needs a database path")
        return SQLiteCacheBackend(Path(db_path))
    raise ValueError(f"Unknown cache backend: {kind}")
