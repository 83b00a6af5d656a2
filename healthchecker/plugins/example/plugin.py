"""Example third-party extension.

Shows the three collection hooks a plugin author implements: announce a
provider, add a category of its own, and contribute checks attributed to
that provider. Disable it by not passing it to the runner.
"""

from __future__ import annotations

import os
import time
from collections.abc import Mapping

import httpx

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.collection import Collector, HealthCheckerExtension
from healthchecker.registry.categories import HealthCategory
from healthchecker.registry.providers import ProviderMetadata

PROVIDER = "example"
DISABLE_NOTE = " To hide this, remove the example extension from the runner."


class CustomConfigCheck(HealthCheck):
    """Warns until the extension's API key is configured."""

    env_var = "EXAMPLE_API_KEY"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    @property
    def slug(self) -> str:
        return "example.custom_config"

    @property
    def category(self) -> str:
        return "thirdparty"

    @property
    def provider(self) -> str:
        return PROVIDER

    @property
    def title(self) -> str:
        return "Example API key"

    def action_url(self, status: HealthStatus | None = None) -> str | None:
        # Fix-it link only when the key is missing.
        if status is HealthStatus.WARNING:
            return "/settings/example"
        return None

    def perform_check(self) -> CheckResult:
        if not self._environ.get(self.env_var):
            return self.warning(
                f"[EXAMPLE CHECK] <code>{self.env_var}</code> is not set." + DISABLE_NOTE
            )
        return self.good("[EXAMPLE CHECK] API key is configured." + DISABLE_NOTE)


class ThirdPartyServiceCheck(HealthCheck):
    """HEAD request to an external service with a 10 second cap."""

    uses = frozenset({"http_client"})
    slow_seconds = 3.0

    def __init__(self, url: str = "https://pypi.org/", timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    @property
    def slug(self) -> str:
        return "example.thirdparty_service"

    @property
    def category(self) -> str:
        return "thirdparty"

    @property
    def provider(self) -> str:
        return PROVIDER

    @property
    def title(self) -> str:
        return "Third-party service reachability"

    def perform_check(self) -> CheckResult:
        t0 = time.perf_counter()
        try:
            client = self.resource("http_client", None)
            if client is not None:
                client.head(self.url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as c:
                    c.head(self.url)
        except httpx.HTTPError:
            return self.critical(
                f"[EXAMPLE CHECK] Cannot reach {self.url}. Check your internet connection "
                "or firewall settings." + DISABLE_NOTE
            )
        duration = time.perf_counter() - t0

        if duration > self.slow_seconds:
            return self.warning(
                f"[EXAMPLE CHECK] {self.url} is reachable but responding slowly." + DISABLE_NOTE
            )
        return self.good(
            f"[EXAMPLE CHECK] {self.url} is reachable and responding normally." + DISABLE_NOTE
        )


class ExamplePlugin(HealthCheckerExtension):
    name = "example"

    def __init__(self, service_url: str = "https://pypi.org/") -> None:
        self.service_url = service_url

    def collect_providers(self, collector: Collector[ProviderMetadata]) -> None:
        collector.add(ProviderMetadata(
            slug=PROVIDER,
            name="Example Provider",
            description="Example health checks demonstrating the extension API",
            icon="fa-flask",
            version="1.0.0",
        ))

    def collect_categories(self, collector: Collector[HealthCategory]) -> None:
        collector.add(HealthCategory(
            slug="thirdparty",
            label="CATEGORY_THIRDPARTY",
            icon="fa-plug",
            sort_order=90,
        ))

    def collect_checks(self, collector: Collector[HealthCheck]) -> None:
        collector.add(CustomConfigCheck())
        collector.add(ThirdPartyServiceCheck(self.service_url))
