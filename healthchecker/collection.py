"""Collection protocol — how independent extensions contribute to a report.

Before every report the runner broadcasts three requests (providers,
categories, checks). Each extension gets its own typed ``Collector`` per
request; a handler that raises only loses its own contributions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Generic, TypeVar

from healthchecker.checks.base import HealthCheck
from healthchecker.errors import InvalidContributionError
from healthchecker.registry.categories import HealthCategory
from healthchecker.registry.providers import ProviderMetadata

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionKind(str, Enum):
    PROVIDERS = "providers"
    CATEGORIES = "categories"
    CHECKS = "checks"

    @property
    def accepts(self) -> type:
        return _ACCEPTS[self]

    @property
    def handler_name(self) -> str:
        return f"collect_{self.value}"


_ACCEPTS: dict[CollectionKind, type] = {
    CollectionKind.PROVIDERS: ProviderMetadata,
    CollectionKind.CATEGORIES: HealthCategory,
    CollectionKind.CHECKS: HealthCheck,
}


class Collector(Generic[T]):
    """Append-only, type-checked list handed to one extension handler."""

    def __init__(self, kind: CollectionKind) -> None:
        self.kind = kind
        self._items: list[T] = []

    def add(self, item: T) -> None:
        if not isinstance(item, self.kind.accepts):
            raise InvalidContributionError(self.kind.value, self.kind.accepts, item)
        self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    @property
    def items(self) -> list[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


class HealthCheckerExtension:
    """Base class for extensions. Override only the handlers you need.

    Handlers must be cheap: they instantiate objects, they do not execute
    checks. They are called once per report generation.
    """

    name: str = "extension"

    def collect_providers(self, collector: Collector[ProviderMetadata]) -> None:
        pass

    def collect_categories(self, collector: Collector[HealthCategory]) -> None:
        pass

    def collect_checks(self, collector: Collector[HealthCheck]) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


def broadcast(kind: CollectionKind, extensions: Iterable[HealthCheckerExtension]) -> list:
    """Ask every extension for contributions of ``kind`` and merge them in order."""
    merged: list = []
    for extension in extensions:
        collector: Collector = Collector(kind)
        handler = getattr(extension, kind.handler_name, None)
        if handler is None:
            continue
        try:
            handler(collector)
        except InvalidContributionError as e:
            logger.error(
                "Extension %s made an invalid %s contribution, skipping it: %s",
                getattr(extension, "name", extension), kind.value, e,
            )
            continue
        except Exception:
            logger.exception(
                "Extension %s failed while collecting %s, skipping it",
                getattr(extension, "name", extension), kind.value,
            )
            continue
        merged.extend(collector.items)
    return merged
