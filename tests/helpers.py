"""Test doubles shared across the suite."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.collection import Collector, HealthCheckerExtension
from healthchecker.registry.categories import HealthCategory
from healthchecker.registry.providers import ProviderMetadata


class StaticCheck(HealthCheck):
    """Check returning a fixed status; can sleep, raise and count calls."""

    def __init__(
        self,
        slug: str,
        category: str = "x",
        status: HealthStatus = HealthStatus.GOOD,
        description: str = "ok",
        delay: float = 0.0,
        error: Exception | None = None,
        calls: list[int] | None = None,
    ) -> None:
        self._slug = slug
        self._category = category
        self._status = status
        self._description = description
        self._delay = delay
        self._error = error
        self.calls = calls if calls is not None else []

    @property
    def slug(self) -> str:
        return self._slug

    @property
    def category(self) -> str:
        return self._category

    @property
    def provider(self) -> str:
        return self._slug.split(".", 1)[0]

    def perform_check(self) -> CheckResult:
        self.calls.append(1)
        if self._delay:
            time.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._result(self._status, self._description)


class StaticExtension(HealthCheckerExtension):
    """Extension contributing fixed lists; ``fail_on`` makes one handler raise."""

    def __init__(
        self,
        name: str = "static",
        checks: Iterable[HealthCheck] = (),
        categories: Iterable[HealthCategory] = (),
        providers: Iterable[ProviderMetadata] = (),
        fail_on: str | None = None,
    ) -> None:
        self.name = name
        self.checks = list(checks)
        self.categories = list(categories)
        self.providers = list(providers)
        self.fail_on = fail_on

    def collect_providers(self, collector: Collector) -> None:
        if self.fail_on == "providers":
            raise RuntimeError(f"{self.name} exploded")
        collector.extend(self.providers)

    def collect_categories(self, collector: Collector) -> None:
        if self.fail_on == "categories":
            raise RuntimeError(f"{self.name} exploded")
        collector.extend(self.categories)

    def collect_checks(self, collector: Collector) -> None:
        if self.fail_on == "checks":
            raise RuntimeError(f"{self.name} exploded")
        collector.extend(self.checks)


class FakeClock:
    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start
        self._lock = threading.Lock()

    def __call__(self) -> float:
        with self._lock:
            return self.now

    def advance(self, seconds: float) -> None:
        with self._lock:
            self.now += seconds


class NeedsDatabase(HealthCheck):
    """Requires a database, optionally uses an HTTP client."""

    requires = frozenset({"database"})
    uses = frozenset({"http_client"})

    @property
    def slug(self):
        return "core.needs_db"

    @property
    def category(self):
        return "database"

    def perform_check(self):
        db = self.resource("database")
        client = self.resource("http_client", None)
        return self.good(f"db={db} client={client}")

