from __future__ import annotations

from enum import Enum


class HealthStatus(str, Enum):
    """Severity of a single check outcome. Lower ``sort_order`` sorts first."""

    CRITICAL = "critical"
    WARNING = "warning"
    GOOD = "good"

    @property
    def label(self) -> str:
        return f"STATUS_{self.name}"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def badge_class(self) -> str:
        return _BADGES[self]

    @property
    def sort_order(self) -> int:
        return _SORT_ORDER[self]


_ICONS = {
    HealthStatus.CRITICAL: "fa-times-circle",
    HealthStatus.WARNING: "fa-exclamation-triangle",
    HealthStatus.GOOD: "fa-check-circle",
}

_BADGES = {
    HealthStatus.CRITICAL: "bg-danger",
    HealthStatus.WARNING: "bg-warning text-dark",
    HealthStatus.GOOD: "bg-success",
}

_SORT_ORDER = {
    HealthStatus.CRITICAL: 1,
    HealthStatus.WARNING: 2,
    HealthStatus.GOOD: 3,
}
