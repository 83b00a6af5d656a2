"""Host checks — interpreter, filesystem and runtime flags."""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
from collections.abc import Mapping

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.plugins.core.config import DiskConfig

MINIMUM_PYTHON = (3, 10)
RECOMMENDED_PYTHON = (3, 12)


class PythonVersionCheck(HealthCheck):
    def __init__(self, version_info: tuple[int, ...] | None = None) -> None:
        self._version = tuple(version_info or sys.version_info[:3])

    @property
    def slug(self) -> str:
        return "core.python_version"

    @property
    def category(self) -> str:
        return "system"

    @property
    def docs_url(self) -> str | None:
        return "https://devguide.python.org/versions/"

    def perform_check(self) -> CheckResult:
        current = ".".join(str(p) for p in self._version)
        if self._version[:2] < MINIMUM_PYTHON:
            return self.critical(
                f"Python {current} is no longer supported. Upgrade to "
                f"{_fmt(RECOMMENDED_PYTHON)} or later."
            )
        if self._version[:2] < RECOMMENDED_PYTHON:
            return self.warning(
                f"Python {current} works, but {_fmt(RECOMMENDED_PYTHON)} or later is recommended."
            )
        return self.good(f"Python {current} is a supported release.")


class DiskSpaceCheck(HealthCheck):
    """Free space on the filesystem holding ``disk.path``."""

    def __init__(self, disk: DiskConfig | None = None) -> None:
        self.disk = disk or DiskConfig()

    @property
    def slug(self) -> str:
        return "core.disk_space"

    @property
    def category(self) -> str:
        return "performance"

    def perform_check(self) -> CheckResult:
        usage = shutil.disk_usage(self.disk.path)
        free_pct = usage.free / usage.total * 100 if usage.total else 0.0
        free_gb = usage.free / 1024**3
        summary = f"{free_gb:.1f} GB free on {self.disk.path} ({free_pct:.1f}%)."

        if free_pct < self.disk.critical_percent:
            return self.critical(f"Disk almost full: {summary}")
        if free_pct < self.disk.warn_percent:
            return self.warning(f"Disk space is running low: {summary}")
        return self.good(summary)


class TempDirWritableCheck(HealthCheck):
    @property
    def slug(self) -> str:
        return "core.temp_dir_writable"

    @property
    def category(self) -> str:
        return "system"

    def perform_check(self) -> CheckResult:
        tmp_dir = tempfile.gettempdir()
        try:
            with tempfile.NamedTemporaryFile(dir=tmp_dir) as fh:
                fh.write(b"ok")
                fh.flush()
        except OSError as e:
            return self.critical(f"Temporary directory <code>{tmp_dir}</code> is not writable: {e}")
        return self.good(f"Temporary directory <code>{tmp_dir}</code> is writable.")


class DebugModeCheck(HealthCheck):
    """Development-mode flags left on in a running deployment."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    @property
    def slug(self) -> str:
        return "core.debug_mode"

    @property
    def category(self) -> str:
        return "security"

    def action_url(self, status: HealthStatus | None = None) -> str | None:
        if status is HealthStatus.WARNING:
            return "https://docs.python.org/3/library/devmode.html"
        return None

    def perform_check(self) -> CheckResult:
        enabled = []
        if self._environ.get("DEBUG", "").lower() in ("1", "true", "yes", "on"):
            enabled.append("DEBUG")
        if sys.flags.dev_mode or self._environ.get("PYTHONDEVMODE"):
            enabled.append("Python development mode")
        if self._environ.get("PYTHONASYNCIODEBUG"):
            enabled.append("asyncio debug")

        if enabled:
            return self.warning(
                "Debug settings are enabled: " + ", ".join(enabled)
                + ". They can leak internals and slow the application down."
            )
        return self.good("No debug settings are enabled.")


def _fmt(version: tuple[int, ...]) -> str:
    return ".".join(str(p) for p in version)
