"""Provider registry — attribution metadata for whoever contributed a check."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CORE_PROVIDER = "core"


@dataclass(frozen=True)
class ProviderMetadata:
    """Identifies an extension in reports. Checks reference it by ``slug``."""

    slug: str
    name: str
    description: str = ""
    url: str | None = None
    icon: str | None = None
    logo_url: str | None = None
    version: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "icon": self.icon,
            "logoUrl": self.logo_url,
            "version": self.version,
        }


def core_provider() -> ProviderMetadata:
    from healthchecker import __version__

    return ProviderMetadata(
        slug=CORE_PROVIDER,
        name="Health Checker",
        description="Built-in health checks",
        icon="fa-heartbeat",
        version=__version__,
    )


class ProviderRegistry:
    """Slug-keyed map of providers, always containing the ``core`` provider."""

    def __init__(self, warn_on_collision: bool = True) -> None:
        self._providers: dict[str, ProviderMetadata] = {}
        self._warn_on_collision = warn_on_collision
        self.reset()

    def register(self, provider: ProviderMetadata) -> None:
        if not provider.slug:
            raise ValueError("Provider slug is required")
        existing = self._providers.get(provider.slug)
        if (
            existing is not None
            and existing != provider
            and provider.slug != CORE_PROVIDER
            and self._warn_on_collision
        ):
            logger.warning(
                "Provider '%s' registered twice — '%s' replaces '%s'",
                provider.slug, provider.name, existing.name,
            )
        self._providers[provider.slug] = provider

    def get(self, slug: str) -> ProviderMetadata | None:
        return self._providers.get(slug)

    def has(self, slug: str) -> bool:
        return slug in self._providers

    def all(self) -> dict[str, ProviderMetadata]:
        return dict(self._providers)

    def third_party(self) -> dict[str, ProviderMetadata]:
        return {slug: p for slug, p in self._providers.items() if slug != CORE_PROVIDER}

    def reset(self) -> None:
        """Drop every registered provider and re-seed ``core``."""
        self._providers.clear()
        self._providers[CORE_PROVIDER] = core_provider()

    def __len__(self) -> int:
        return len(self._providers)
