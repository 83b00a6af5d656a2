"""Check contract, result and status model."""

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus

__all__ = ["CheckResult", "HealthCheck", "HealthStatus"]
