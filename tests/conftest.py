"""Shared test fixtures."""

from __future__ import annotations

import pytest

from healthchecker import i18n
from healthchecker.cache import MemoryCacheBackend
from healthchecker.collection import HealthCheckerExtension
from healthchecker.config import Settings
from healthchecker.runner import HealthCheckRunner

from tests.helpers import FakeClock


@pytest.fixture(autouse=True)
def _reset_strings():
    yield
    i18n.reset_strings()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        max_workers=4,
        check_timeout_seconds=5.0,
        cache_backend="memory",
        warn_on_slug_collision=True,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> MemoryCacheBackend:
    return MemoryCacheBackend(clock=clock)


@pytest.fixture
def make_runner(settings: Settings, cache: MemoryCacheBackend):
    """Factory building a runner over the given extensions."""

    def _make(*extensions: HealthCheckerExtension, **kwargs) -> HealthCheckRunner:
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("cache", cache)
        return HealthCheckRunner(list(extensions), **kwargs)

    return _make
