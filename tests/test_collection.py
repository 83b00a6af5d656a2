"""Tests for collectors and the extension broadcast."""

from __future__ import annotations

import logging

import pytest

from healthchecker.collection import (
    CollectionKind,
    Collector,
    HealthCheckerExtension,
    broadcast,
)
from healthchecker.errors import InvalidContributionError
from healthchecker.registry import HealthCategory, ProviderMetadata

from tests.helpers import StaticCheck, StaticExtension


class TestCollector:
    def test_accepts_matching_type(self):
        collector = Collector(CollectionKind.CATEGORIES)
        cat = HealthCategory("x", "X", "i")
        collector.add(cat)
        assert collector.items == [cat]
        assert len(collector) == 1

    def test_rejects_wrong_type(self):
        collector = Collector(CollectionKind.CHECKS)
        with pytest.raises(InvalidContributionError) as exc:
            collector.add(HealthCategory("x", "X", "i"))
        assert "'checks'" in str(exc.value)
        assert "HealthCategory" in str(exc.value)
        assert len(collector) == 0

    def test_invalid_contribution_is_a_type_error(self):
        with pytest.raises(TypeError):
            Collector(CollectionKind.PROVIDERS).add("acme")

    def test_items_is_a_copy(self):
        collector = Collector(CollectionKind.PROVIDERS)
        collector.items.append("junk")
        assert collector.items == []

    def test_handler_names(self):
        assert CollectionKind.PROVIDERS.handler_name == "collect_providers"
        assert CollectionKind.CHECKS.accepts.__name__ == "HealthCheck"


class TestBroadcast:
    def test_merges_in_extension_order(self):
        a = StaticExtension("a", checks=[StaticCheck("a.one"), StaticCheck("a.two")])
        b = StaticExtension("b", checks=[StaticCheck("b.one")])
        merged = broadcast(CollectionKind.CHECKS, [a, b])
        assert [c.slug for c in merged] == ["a.one", "a.two", "b.one"]

    def test_raising_extension_loses_only_its_contribution(self, caplog):
        broken = StaticExtension("broken", checks=[StaticCheck("broken.x")], fail_on="checks")
        good = StaticExtension("good", checks=[StaticCheck("good.y")])
        with caplog.at_level(logging.ERROR):
            merged = broadcast(CollectionKind.CHECKS, [broken, good])
        assert [c.slug for c in merged] == ["good.y"]
        assert "broken" in caplog.text

    def test_invalid_contribution_skips_that_extension(self, caplog):
        class Sloppy(HealthCheckerExtension):
            name = "sloppy"

            def collect_categories(self, collector):
                collector.add(HealthCategory("fine", "Fine", "i"))
                collector.add(ProviderMetadata("oops", "Wrong type"))

        other = StaticExtension("other", categories=[HealthCategory("other", "O", "i")])
        with caplog.at_level(logging.ERROR):
            merged = broadcast(CollectionKind.CATEGORIES, [Sloppy(), other])
        # Partial contributions from the failing handler are discarded too
        assert [c.slug for c in merged] == ["other"]
        assert "invalid categories contribution" in caplog.text

    def test_default_handlers_contribute_nothing(self):
        ext = HealthCheckerExtension()
        for kind in CollectionKind:
            assert broadcast(kind, [ext]) == []

    def test_each_extension_gets_a_fresh_collector(self):
        seen = []

        class Spy(HealthCheckerExtension):
            def collect_providers(self, collector):
                seen.append(len(collector))
                collector.add(ProviderMetadata(f"p{len(seen)}", "P"))

        broadcast(CollectionKind.PROVIDERS, [Spy(), Spy()])
        assert seen == [0, 0]
