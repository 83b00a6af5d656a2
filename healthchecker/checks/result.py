"""CheckResult — the immutable outcome of one check execution."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from healthchecker.checks.status import HealthStatus
from healthchecker.sanitizer import default_sanitizer


@dataclass(frozen=True)
class CheckResult:
    """Result of a single health check execution.

    Raw probe text is kept as-is in memory; ``to_dict()`` is the only place
    it is made presentation-safe.
    """

    status: HealthStatus
    title: str
    description: str
    slug: str
    category: str
    provider: str = "core"
    docs_url: str | None = None
    action_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "title": default_sanitizer.strip_tags(self.title),
            "description": default_sanitizer.sanitize(self.description),
            "slug": self.slug,
            "category": self.category,
            "provider": self.provider,
            "docsUrl": self.docs_url,
            "actionUrl": self.action_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CheckResult:
        """Rebuild a result from ``to_dict()`` output.

        Raises ``ValueError`` for an unknown status and ``KeyError`` when a
        required key is missing.
        """
        return cls(
            status=HealthStatus(data["status"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            slug=str(data["slug"]),
            category=str(data["category"]),
            provider=str(data.get("provider") or "core"),
            docs_url=data.get("docsUrl"),
            action_url=data.get("actionUrl"),
        )
