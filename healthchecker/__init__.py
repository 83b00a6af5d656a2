"""Health checker — pluggable health diagnostics engine.

Extensions contribute providers, categories and checks; the runner
collects, executes, caches and aggregates them into a status-ranked report.
"""

__version__ = "1.0.0"

from healthchecker.checks import CheckResult, HealthCheck, HealthStatus
from healthchecker.collection import CollectionKind, Collector, HealthCheckerExtension
from healthchecker.errors import (
    CheckTimeoutError,
    HealthCheckerError,
    InvalidContributionError,
    MissingDependencyError,
    NoChecksAvailableError,
)
from healthchecker.registry import CategoryRegistry, HealthCategory, ProviderMetadata, ProviderRegistry
from healthchecker.runner import HealthCheckRunner

__all__ = [
    "CategoryRegistry",
    "CheckResult",
    "CheckTimeoutError",
    "CollectionKind",
    "Collector",
    "HealthCategory",
    "HealthCheck",
    "HealthCheckRunner",
    "HealthCheckerError",
    "HealthCheckerExtension",
    "HealthStatus",
    "InvalidContributionError",
    "MissingDependencyError",
    "NoChecksAvailableError",
    "ProviderMetadata",
    "ProviderRegistry",
]
