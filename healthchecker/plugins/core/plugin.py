"""Core extension — built-in categories and checks."""

from __future__ import annotations

import logging
from pathlib import Path

from healthchecker.checks.base import HealthCheck
from healthchecker.collection import Collector, HealthCheckerExtension
from healthchecker.plugins.core.config import CoreChecksConfig, load_checks_config
from healthchecker.plugins.core.database import DatabaseConnectionCheck, SQLiteIntegrityCheck
from healthchecker.plugins.core.network import build_probe_check
from healthchecker.plugins.core.system import (
    DebugModeCheck,
    DiskSpaceCheck,
    PythonVersionCheck,
    TempDirWritableCheck,
)
from healthchecker.registry.categories import HealthCategory

logger = logging.getLogger(__name__)

CORE_CATEGORIES = [
    HealthCategory(slug="system", label="CATEGORY_SYSTEM", icon="fa-server", sort_order=10),
    HealthCategory(slug="database", label="CATEGORY_DATABASE", icon="fa-database", sort_order=20),
    HealthCategory(slug="security", label="CATEGORY_SECURITY", icon="fa-shield-alt", sort_order=30),
    HealthCategory(slug="connectivity", label="CATEGORY_CONNECTIVITY", icon="fa-network-wired", sort_order=40),
    HealthCategory(slug="performance", label="CATEGORY_PERFORMANCE", icon="fa-tachometer-alt", sort_order=60),
]


class CorePlugin(HealthCheckerExtension):
    """Registers the core categories and every enabled built-in check.

    Settings come from ``config`` or, when omitted, from the checks file at
    ``config_path`` (re-read on ``reload()``).
    """

    name = "core"

    def __init__(
        self,
        config: CoreChecksConfig | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._config_path = config_path
        self._config = config

    @property
    def config(self) -> CoreChecksConfig:
        if self._config is None:
            self._config = (
                load_checks_config(self._config_path) if self._config_path else CoreChecksConfig()
            )
        return self._config

    def reload(self) -> CoreChecksConfig:
        self._config = None
        return self.config

    def collect_categories(self, collector: Collector[HealthCategory]) -> None:
        collector.extend(CORE_CATEGORIES)

    def collect_checks(self, collector: Collector[HealthCheck]) -> None:
        config = self.config
        for check in self.build_checks(config):
            if config.is_enabled(check.slug):
                collector.add(check)
            else:
                logger.debug("Core check %s disabled by configuration", check.slug)

    @staticmethod
    def build_checks(config: CoreChecksConfig) -> list[HealthCheck]:
        checks: list[HealthCheck] = [
            PythonVersionCheck(),
            TempDirWritableCheck(),
            DatabaseConnectionCheck(),
            SQLiteIntegrityCheck(),
            DebugModeCheck(),
            DiskSpaceCheck(config.disk),
        ]
        checks.extend(build_probe_check(p) for p in config.probes)
        return checks
