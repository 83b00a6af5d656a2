"""Health check runner — collects, executes, caches and aggregates checks.

Every public operation starts with a fresh collection pass so the report
always reflects the extensions registered right now. Checks run on daemon
worker threads, at most ``max_workers`` at a time; a slow or broken check
turns into a warning result instead of stalling or aborting the batch.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import deque
from collections.abc import Iterable, Mapping
from concurrent.futures import FIRST_COMPLETED, Future, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from healthchecker import i18n
from healthchecker.cache import CacheBackend, SingleFlight, create_backend
from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.collection import CollectionKind, HealthCheckerExtension, broadcast
from healthchecker.config import Settings, settings as default_settings
from healthchecker.errors import CheckTimeoutError, NoChecksAvailableError
from healthchecker.registry.categories import CategoryRegistry, HealthCategory
from healthchecker.registry.providers import ProviderMetadata, ProviderRegistry
from healthchecker.sanitizer import default_sanitizer

logger = logging.getLogger(__name__)

CACHE_KEY = "healthcheck_results"

# How often the executor loop wakes up to look at timeouts and cancellation.
_POLL_INTERVAL = 0.05

_NO_FILTER = (None, "", "0")


@dataclass
class CollectionSnapshot:
    """Everything gathered by one collection pass."""

    providers: list[ProviderMetadata] = field(default_factory=list)
    categories: list[HealthCategory] = field(default_factory=list)
    checks: list[HealthCheck] = field(default_factory=list)


class HealthCheckRunner:
    """Orchestrates collection and execution of health checks."""

    def __init__(
        self,
        extensions: Iterable[HealthCheckerExtension] | None = None,
        *,
        categories: CategoryRegistry | None = None,
        providers: ProviderRegistry | None = None,
        resources: Mapping[str, Any] | None = None,
        cache: CacheBackend | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or default_settings
        warn = self.settings.warn_on_slug_collision
        self.categories = categories if categories is not None else CategoryRegistry(warn_on_collision=warn)
        self.providers = providers if providers is not None else ProviderRegistry(warn_on_collision=warn)
        self._extensions: list[HealthCheckerExtension] = list(extensions or [])
        self._resources: dict[str, Any] = dict(resources or {})
        self._cache = cache if cache is not None else create_backend(
            self.settings.cache_backend, self.settings.cache_db_path,
        )
        self._single_flight = SingleFlight()
        self._collect_lock = threading.Lock()
        self._state_lock = threading.Lock()

        self._results: list[CheckResult] = []
        self._last_run: datetime | None = None
        self._partial = False

    # ── Extensions & resources ──────────────────────────────────────────────

    def add_extension(self, extension: HealthCheckerExtension) -> None:
        self._extensions.append(extension)

    @property
    def extensions(self) -> list[HealthCheckerExtension]:
        return list(self._extensions)

    def set_resource(self, name: str, value: Any) -> None:
        """Make ``value`` available to checks that declare ``name``."""
        self._resources[name] = value

    # ── Collection ──────────────────────────────────────────────────────────

    def collect_all(self) -> CollectionSnapshot:
        """Run the three collection requests and return the merged snapshot."""
        with self._collect_lock:
            self._collect_registries()
            checks = self._unique_checks(broadcast(CollectionKind.CHECKS, self._extensions))
            snapshot = CollectionSnapshot(
                providers=list(self.providers.all().values()),
                categories=self.categories.sorted(),
                checks=checks,
            )
        logger.debug(
            "Collected %d providers, %d categories, %d checks from %d extensions",
            len(snapshot.providers), len(snapshot.categories),
            len(snapshot.checks), len(self._extensions),
        )
        return snapshot

    def initialize(self) -> None:
        """Collect providers and categories only."""
        with self._collect_lock:
            self._collect_registries()

    def _collect_registries(self) -> None:
        providers = broadcast(CollectionKind.PROVIDERS, self._extensions)
        categories = broadcast(CollectionKind.CATEGORIES, self._extensions)
        self.providers.reset()
        for provider in providers:
            self.providers.register(provider)
        self.categories.reset()
        for category in categories:
            self.categories.register(category)

    @staticmethod
    def _unique_checks(checks: list[HealthCheck]) -> list[HealthCheck]:
        seen: set[str] = set()
        unique = []
        for check in checks:
            try:
                slug = check.slug
            except Exception:
                logger.exception("Dropping check %s: slug is not readable", type(check).__name__)
                continue
            if slug in seen:
                logger.warning("Duplicate check slug '%s' from %r — keeping the first", slug, check)
                continue
            seen.add(slug)
            unique.append(check)
        return unique

    # ── Execution ───────────────────────────────────────────────────────────

    def run(
        self,
        cancel: threading.Event | None = None,
        deadline: float | None = None,
    ) -> None:
        """Collect and execute every check, replacing the last-run state.

        ``cancel`` and ``deadline`` (seconds from now) stop the run early;
        checks still in flight are abandoned and the run is marked partial.
        """
        started_at = datetime.now(timezone.utc)
        snapshot = self.collect_all()
        results, partial = self._execute(snapshot.checks, cancel=cancel, deadline=deadline)
        results = self._sort(results)

        with self._state_lock:
            self._results = results
            self._last_run = started_at
            self._partial = partial

        logger.info(
            "Health check run complete: %d results (%d critical, %d warning)%s",
            len(results),
            sum(1 for r in results if r.status is HealthStatus.CRITICAL),
            sum(1 for r in results if r.status is HealthStatus.WARNING),
            " — PARTIAL" if partial else "",
        )

    def run_category(self, category: str) -> list[CheckResult]:
        """Execute only the checks in ``category``. Does not touch last-run state."""
        snapshot = self.collect_all()
        checks = [c for c in snapshot.checks if _safe_category(c) == category]
        results, _ = self._execute(checks)
        return self._sort(results)

    def run_single_check(self, slug: str) -> CheckResult | None:
        """Execute the check with ``slug``; ``None`` when no such check exists."""
        snapshot = self.collect_all()
        check = next((c for c in snapshot.checks if c.slug == slug), None)
        if check is None:
            logger.info("Health check '%s' not found", slug)
            return None
        results, _ = self._execute([check])
        return results[0] if results else None

    def _run_check(self, check: HealthCheck) -> CheckResult:
        check.bind(self._resources)
        try:
            return check.run()
        finally:
            check.release()

    def _start(self, check: HealthCheck) -> Future[CheckResult]:
        """Run ``check`` on its own daemon thread."""
        future: Future[CheckResult] = Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self._run_check(check))
            except Exception as exc:
                future.set_exception(exc)

        threading.Thread(target=work, name=f"healthcheck-{check._safe_slug()}", daemon=True).start()
        return future

    def _execute(
        self,
        checks: list[HealthCheck],
        cancel: threading.Event | None = None,
        deadline: float | None = None,
    ) -> tuple[list[CheckResult], bool]:
        """Run ``checks`` in parallel. Returns results in input order and a partial flag.

        At most ``max_workers`` checks run at once. A check that exceeds the
        timeout is abandoned and stops counting against that limit, so queued
        checks start even while hung ones are still blocked.
        """
        if not checks:
            return [], False

        if cancel is not None and cancel.is_set():
            logger.info("Health check run cancelled before start")
            return [], True

        timeout = self.settings.check_timeout_seconds
        stop_at = time.monotonic() + deadline if deadline is not None else None
        n_workers = max(1, self.settings.max_workers)
        queued = deque(range(len(checks)))
        running: dict[Future[CheckResult], int] = {}
        started: dict[int, float] = {}
        slots: list[CheckResult | None] = [None] * len(checks)
        partial = False

        while queued or running:
            while queued and len(running) < n_workers:
                index = queued.popleft()
                started[index] = time.monotonic()
                running[self._start(checks[index])] = index

            done, _ = wait(list(running), timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)

            for future in done:
                index = running.pop(future)
                try:
                    slots[index] = future.result()
                except Exception as exc:
                    logger.error("Health check worker for %r raised: %s", checks[index], exc)
                    slots[index] = checks[index].failure(i18n.text("CHECK_ERROR", str(exc)))

            if not (queued or running):
                break

            if (cancel is not None and cancel.is_set()) or (
                stop_at is not None and time.monotonic() >= stop_at
            ):
                logger.warning(
                    "Health check run stopped early — abandoning %d unfinished checks",
                    len(queued) + len(running),
                )
                partial = True
                break

            if timeout and timeout > 0:
                now = time.monotonic()
                for future, index in list(running.items()):
                    if now - started[index] < timeout:
                        continue
                    # Frees the slot; the thread is left to finish on its own.
                    del running[future]
                    logger.warning("%s", CheckTimeoutError(checks[index]._safe_slug(), timeout))
                    slots[index] = checks[index].failure(i18n.text("CHECK_TIMEOUT", f"{timeout:g}"))

        return [r for r in slots if r is not None], partial

    def _sort(self, results: list[CheckResult]) -> list[CheckResult]:
        # Stable: equal statuses keep registration order.
        return sorted(results, key=lambda r: r.status.sort_order)

    # ── Result views ────────────────────────────────────────────────────────

    def get_results(self) -> list[CheckResult]:
        with self._state_lock:
            return list(self._results)

    def get_results_by_category(self) -> dict[str, list[CheckResult]]:
        """Group last-run results, registered categories first in sort order."""
        grouped: dict[str, list[CheckResult]] = {}
        for result in self.get_results():
            grouped.setdefault(result.category, []).append(result)

        ordered: dict[str, list[CheckResult]] = {}
        for category in self.categories.sorted():
            if category.slug in grouped:
                ordered[category.slug] = grouped[category.slug]
        for slug, results in grouped.items():
            if slug not in ordered:
                ordered[slug] = results
        return ordered

    def get_results_by_status(self) -> dict[str, list[CheckResult]]:
        grouped: dict[str, list[CheckResult]] = {s.value: [] for s in HealthStatus}
        for result in self.get_results():
            grouped[result.status.value].append(result)
        return grouped

    def get_filtered_results(
        self,
        status_filter: str | HealthStatus | None = None,
        category_filter: str | None = None,
    ) -> dict[str, list[CheckResult]]:
        """Grouped results narrowed by category, then status. Empty groups are dropped."""
        results = self.get_results_by_category()

        if category_filter not in _NO_FILTER:
            results = {slug: rs for slug, rs in results.items() if slug == category_filter}

        if status_filter not in _NO_FILTER:
            status = _parse_status(status_filter)
            if status is not None:
                results = {
                    slug: [r for r in rs if r.status is status]
                    for slug, rs in results.items()
                }
                results = {slug: rs for slug, rs in results.items() if rs}

        return results

    def get_metadata(self) -> dict[str, Any]:
        """Categories, providers and check descriptors without running anything."""
        snapshot = self.collect_all()
        if not snapshot.checks:
            raise NoChecksAvailableError(i18n.text("NO_CHECKS_AVAILABLE"))

        checks = []
        for check in snapshot.checks:
            try:
                title = check.title
            except Exception:
                logger.exception("Check %s has an unreadable title", check.slug)
                title = check.slug
            checks.append({
                "slug": check.slug,
                "category": _safe_category(check),
                "provider": check.provider,
                "title": default_sanitizer.strip_tags(title),
            })

        return {
            "categories": [c.to_dict() for c in snapshot.categories],
            "providers": [p.to_dict() for p in snapshot.providers],
            "checks": checks,
        }

    # ── Aggregates ──────────────────────────────────────────────────────────

    def _count(self, status: HealthStatus) -> int:
        return sum(1 for r in self.get_results() if r.status is status)

    @property
    def critical_count(self) -> int:
        return self._count(HealthStatus.CRITICAL)

    @property
    def warning_count(self) -> int:
        return self._count(HealthStatus.WARNING)

    @property
    def good_count(self) -> int:
        return self._count(HealthStatus.GOOD)

    @property
    def total_count(self) -> int:
        return len(self.get_results())

    @property
    def last_run(self) -> datetime | None:
        with self._state_lock:
            return self._last_run

    @property
    def is_partial(self) -> bool:
        with self._state_lock:
            return self._partial

    def _stats(self, results: list[CheckResult] | None = None) -> dict[str, int]:
        if results is None:
            results = self.get_results()
        counts = {s.value: 0 for s in HealthStatus}
        for r in results:
            counts[r.status.value] += 1
        counts["total"] = len(results)
        return counts

    # ── Caching ─────────────────────────────────────────────────────────────

    def run_with_cache(self, ttl: int | None = None) -> None:
        """Fill last-run state from the cache, or run and cache the outcome."""
        if ttl is None or ttl <= 0:
            self.run()
            return

        if self._load_cached():
            return

        with self._single_flight.lock(CACHE_KEY):
            # Another caller may have filled the cache while we waited.
            if self._load_cached():
                return

            self.run()
            if self.is_partial:
                return
            self._store_cached(ttl)

    def get_stats_with_cache(self, ttl: int | None = None) -> dict[str, Any]:
        """Aggregate counts plus last-run timestamp. ``ttl <= 0`` always runs."""
        self.run_with_cache(ttl)
        stats: dict[str, Any] = self._stats()
        stats["lastRun"] = _iso(self.last_run)
        return stats

    def clear_cache(self) -> None:
        try:
            self._cache.delete(CACHE_KEY)
        except Exception:
            logger.exception("Failed to clear health check cache")
            raise
        logger.info("Health check cache cleared")

    def _load_cached(self) -> bool:
        try:
            raw = self._cache.get(CACHE_KEY)
        except Exception:
            logger.exception("Health check cache read failed — treating as a miss")
            return False
        if raw is None:
            return False

        try:
            data = json.loads(raw)
            results = [CheckResult.from_dict(r) for r in data["results"]]
            last_run = datetime.fromisoformat(data["lastRun"]) if data.get("lastRun") else None
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable cached health check results: %s", e)
            self._cache.delete(CACHE_KEY)
            return False

        # Registries are not part of the cached payload.
        self.initialize()
        with self._state_lock:
            self._results = results
            self._last_run = last_run
            self._partial = False
        logger.debug("Health check results served from cache (%d results)", len(results))
        return True

    def _store_cached(self, ttl: int) -> None:
        with self._state_lock:
            payload = {
                "results": [r.to_dict() for r in self._results],
                "lastRun": _iso(self._last_run),
            }
        try:
            self._cache.set(CACHE_KEY, json.dumps(payload), ttl)
        except Exception:
            logger.exception("Health check cache write failed")

    # ── Export ──────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Full report snapshot consumed by renderers and the API."""
        with self._state_lock:
            results = list(self._results)
            last_run = self._last_run
            partial = self._partial

        return {
            "lastRun": _iso(last_run),
            "stats": self._stats(results),
            "categories": [c.to_dict() for c in self.categories.sorted()],
            "providers": [p.to_dict() for p in self.providers.all().values()],
            "results": [r.to_dict() for r in results],
            "partial": partial,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_status(value: str | HealthStatus) -> HealthStatus | None:
    if isinstance(value, HealthStatus):
        return value
    try:
        return HealthStatus(str(value).strip().lower())
    except ValueError:
        logger.debug("Ignoring unknown status filter %r", value)
        return None


def _safe_category(check: HealthCheck) -> str | None:
    try:
        return check.category
    except Exception:
        logger.exception("Check %r has an unreadable category", check)
        return None
