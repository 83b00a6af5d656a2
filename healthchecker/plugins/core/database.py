from __future__ import annotations

import sqlite3
import time

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult

SLOW_QUERY_MS = 500


class DatabaseConnectionCheck(HealthCheck):
    """Round-trip a trivial query over the injected DB-API connection."""

    requires = frozenset({"database"})

    @property
    def slug(self) -> str:
        return "core.database_connection"

    @property
    def category(self) -> str:
        return "database"

    def perform_check(self) -> CheckResult:
        db = self.resource("database")
        t0 = time.perf_counter()
        cursor = db.cursor()
        try:
            cursor.execute("SELECT 1")
            row = cursor.fetchone()
        except Exception as e:
            return self.critical(f"Database query failed: {type(e).__name__}: {e}")
        finally:
            cursor.close()
        latency = (time.perf_counter() - t0) * 1000

        if not row or row[0] != 1:
            return self.critical(f"Database returned an unexpected result: {row!r}")
        if latency > SLOW_QUERY_MS:
            return self.warning(f"Database is responding slowly ({latency:.0f}ms for SELECT 1).")
        return self.good(f"Database connection is working ({latency:.0f}ms).")


class SQLiteIntegrityCheck(HealthCheck):
    """``PRAGMA quick_check`` on SQLite databases; other engines are skipped."""

    requires = frozenset({"database"})

    @property
    def slug(self) -> str:
        return "core.sqlite_integrity"

    @property
    def category(self) -> str:
        return "database"

    def perform_check(self) -> CheckResult:
        db = self.resource("database")
        if not isinstance(db, sqlite3.Connection):
            return self.good("Integrity check only applies to SQLite databases.")

        rows = [r[0] for r in db.execute("PRAGMA quick_check").fetchall()]
        if rows == ["ok"]:
            return self.good("SQLite quick_check reported no problems.")
        problems = "<br>".join(str(r) for r in rows[:5])
        return self.critical(f"SQLite quick_check found {len(rows)} problem(s):<br>{problems}")
