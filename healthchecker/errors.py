"""Exception hierarchy for the health checker engine."""

from __future__ import annotations


class HealthCheckerError(Exception):
    """Base class for all health checker errors."""


class InvalidContributionError(HealthCheckerError, TypeError):
    """An extension appended a value of the wrong type to a collector."""

    def __init__(self, kind: str, expected: type, got: object) -> None:
        self.kind = kind
        self.expected = expected
        self.got_type = type(got).__name__
        super().__init__(
            f"Collection '{kind}' only accepts {expected.__name__} instances. "
            f"Got {self.got_type}."
        )


class MissingDependencyError(HealthCheckerError):
    """A check asked for a resource that was not injected by the runner."""

    def __init__(self, slug: str, resource: str) -> None:
        self.slug = slug
        self.resource = resource
        super().__init__(
            f"Health check {slug} requires '{resource}' but no {resource} was injected."
        )


class CheckTimeoutError(HealthCheckerError):
    """A check exceeded its execution budget."""

    def __init__(self, slug: str, timeout: float) -> None:
        self.slug = slug
        self.timeout = timeout
        super().__init__(f"Health check {slug} timed out after {timeout:g}s")


class NoChecksAvailableError(HealthCheckerError):
    """No extension contributed a single check."""
