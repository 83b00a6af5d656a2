"""Category registry — display groupings contributed by extensions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from healthchecker import i18n

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthCategory:
    """A UI grouping bucket. ``label`` is a translation key or literal text."""

    slug: str
    label: str
    icon: str
    sort_order: int = 50
    logo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "slug": self.slug,
            "label": i18n.text(self.label),
            "icon": self.icon,
            "sortOrder": self.sort_order,
            "logoUrl": self.logo_url,
        }


class CategoryRegistry:
    """Slug-keyed map of categories. Last registration for a slug wins."""

    def __init__(self, warn_on_collision: bool = True) -> None:
        self._categories: dict[str, HealthCategory] = {}
        self._warn_on_collision = warn_on_collision

    def register(self, category: HealthCategory) -> None:
        if not category.slug:
            raise ValueError("Category slug is required")
        existing = self._categories.get(category.slug)
        if existing is not None and existing != category and self._warn_on_collision:
            logger.warning(
                "Category '%s' registered twice — replacing %r with %r",
                category.slug, existing, category,
            )
        self._categories[category.slug] = category

    def get(self, slug: str) -> HealthCategory | None:
        return self._categories.get(slug)

    def has(self, slug: str) -> bool:
        return slug in self._categories

    def all(self) -> dict[str, HealthCategory]:
        return dict(self._categories)

    def sorted(self) -> list[HealthCategory]:
        """Categories by ``sort_order``; equal orders keep registration order."""
        return sorted(self._categories.values(), key=lambda c: c.sort_order)

    def reset(self) -> None:
        self._categories.clear()

    def __len__(self) -> int:
        return len(self._categories)
