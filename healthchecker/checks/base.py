"""Check contract — the base class every probe implements.

Subclasses provide ``slug``, ``category`` and ``perform_check()``. The
engine only ever calls ``run()``, which guarantees a result even when the
probe itself raises.

Per-run resources (a database connection, an HTTP client) are declared in
``requires`` / ``uses`` and injected by the runner right before execution::

    class ConnectionCheck(HealthCheck):
        requires = frozenset({"database"})

        @property
        def slug(self) -> str:
            return "core.database_connection"

        @property
        def category(self) -> str:
            return "database"

        def perform_check(self) -> CheckResult:
            self.resource("database").execute("SELECT 1")
            return self.good("Database connection is working.")
"""

from __future__ import annotations

import abc
import logging
import threading
from collections.abc import Mapping
from typing import Any, ClassVar, final

from healthchecker import i18n
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.errors import MissingDependencyError

logger = logging.getLogger(__name__)

_MISSING = object()


class HealthCheck(abc.ABC):
    """Abstract base for all health checks."""

    # Resources the check cannot run without, and ones it can use if present.
    requires: ClassVar[frozenset[str]] = frozenset()
    uses: ClassVar[frozenset[str]] = frozenset()

    # ── Identity ────────────────────────────────────────────────────────────

    @property
    @abc.abstractmethod
    def slug(self) -> str:
        """Unique ``<provider>.<name>`` identifier."""

    @property
    @abc.abstractmethod
    def category(self) -> str:
        """Slug of the category this check is grouped under."""

    @property
    def provider(self) -> str:
        return "core"

    @property
    def title(self) -> str:
        """Translated title, falling back to the slug."""
        key = "CHECK_" + self.slug.replace(".", "_").upper() + "_TITLE"
        translated = i18n.text(key)
        return translated if translated != key else self.slug

    @property
    def docs_url(self) -> str | None:
        return None

    def action_url(self, status: HealthStatus | None = None) -> str | None:
        """Link to where the problem can be fixed; may depend on ``status``."""
        return None

    # ── Resources ───────────────────────────────────────────────────────────

    def bind(self, resources: Mapping[str, Any]) -> None:
        """Inject the resources this check declared. Called by the runner.

        Bindings are per thread, so a worker abandoned after a timeout cannot
        clear what a later run bound on the same instance.
        """
        wanted = self.requires | self.uses
        bound = {k: v for k, v in resources.items() if k in wanted and v is not None}
        self._binding().resources = bound
        missing = self.requires - bound.keys()
        if missing:
            logger.debug("Check %s is missing resources: %s", self.slug, ", ".join(sorted(missing)))

    def release(self) -> None:
        self._binding().resources = {}

    def resource(self, name: str, default: Any = _MISSING) -> Any:
        """Return an injected resource.

        Raises ``MissingDependencyError`` when the resource was not injected
        and no ``default`` is given.
        """
        resources: Mapping[str, Any] = getattr(self._binding(), "resources", {})
        if name in resources:
            return resources[name]
        if default is not _MISSING:
            return default
        raise MissingDependencyError(self.slug, name)

    def _binding(self) -> threading.local:
        # setdefault keeps concurrent first calls on one instance consistent
        return self.__dict__.setdefault("_bound", threading.local())

    # ── Execution ───────────────────────────────────────────────────────────

    @abc.abstractmethod
    def perform_check(self) -> CheckResult:
        """Inspect the system and return exactly one result."""

    @final
    def run(self) -> CheckResult:
        """Execute the check, converting any exception into a warning result.

        This is the only entry point the engine uses. Do not override it.
        """
        try:
            return self.perform_check()
        except Exception as e:
            logger.warning("Health check %s failed: %s: %s", self._safe_slug(), type(e).__name__, e)
            return self.failure(i18n.text("CHECK_ERROR", str(e) or type(e).__name__))

    def failure(self, description: str) -> CheckResult:
        """Warning result built without trusting the check's own accessors."""
        try:
            return self.warning(description)
        except Exception:
            logger.exception("Health check %s could not describe itself", self._safe_slug())
            slug = self._safe_slug()
            return CheckResult(
                status=HealthStatus.WARNING,
                title=slug,
                description=description,
                slug=slug,
                category=_safe_attr(self, "category", "uncategorised"),
                provider=_safe_attr(self, "provider", "core"),
            )

    # ── Result builders ─────────────────────────────────────────────────────

    def critical(self, description: str) -> CheckResult:
        return self._result(HealthStatus.CRITICAL, description)

    def warning(self, description: str) -> CheckResult:
        return self._result(HealthStatus.WARNING, description)

    def good(self, description: str) -> CheckResult:
        return self._result(HealthStatus.GOOD, description)

    def _result(self, status: HealthStatus, description: str) -> CheckResult:
        return CheckResult(
            status=status,
            title=self.title,
            description=description,
            slug=self.slug,
            category=self.category,
            provider=self.provider,
            docs_url=self.docs_url,
            action_url=self.action_url(status),
        )

    def _safe_slug(self) -> str:
        return _safe_attr(self, "slug", type(self).__name__)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._safe_slug()}>"


def _safe_attr(obj: Any, name: str, fallback: str) -> str:
    try:
        return str(getattr(obj, name))
    except Exception:
        return fallback
