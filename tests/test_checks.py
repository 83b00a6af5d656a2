"""Tests for the HealthCheck contract."""

from __future__ import annotations

import logging
import sys
import threading

import pytest

from healthchecker import i18n
from healthchecker.checks import CheckResult, HealthCheck, HealthStatus
from healthchecker.errors import MissingDependencyError

from tests.helpers import NeedsDatabase, StaticCheck


class LinkedCheck(HealthCheck):
    """Offers a fix link only when something is wrong."""

    def __init__(self, status: HealthStatus):
        self._status = status

    @property
    def slug(self):
        return "core.linked"

    @property
    def category(self):
        return "system"

    @property
    def docs_url(self):
        return "https://docs.example.com/linked"

    def action_url(self, status=None):
        if status is HealthStatus.GOOD:
            return None
        return "/settings/linked"

    def perform_check(self):
        return self._result(self._status, "described")


class BrokenIdentity(HealthCheck):
    @property
    def slug(self):
        return "core.broken_identity"

    @property
    def category(self):
        raise RuntimeError("no category")

    def perform_check(self):
        raise RuntimeError("probe failed")


class TestTitle:
    def test_falls_back_to_slug(self):
        assert StaticCheck("acme.thing").title == "acme.thing"

    def test_uses_translation_key(self):
        i18n.register_strings({"CHECK_ACME_THING_TITLE": "Acme thing"})
        assert StaticCheck("acme.thing").title == "Acme thing"


class TestResultBuilders:
    def test_builder_fills_identity(self):
        result = LinkedCheck(HealthStatus.WARNING).run()
        assert result == CheckResult(
            status=HealthStatus.WARNING,
            title="core.linked",
            description="described",
            slug="core.linked",
            category="system",
            provider="core",
            docs_url="https://docs.example.com/linked",
            action_url="/settings/linked",
        )

    def test_action_url_depends_on_status(self):
        assert LinkedCheck(HealthStatus.GOOD).run().action_url is None
        assert LinkedCheck(HealthStatus.CRITICAL).run().action_url == "/settings/linked"

    @pytest.mark.parametrize("builder,status", [
        ("critical", HealthStatus.CRITICAL),
        ("warning", HealthStatus.WARNING),
        ("good", HealthStatus.GOOD),
    ])
    def test_named_builders(self, builder, status):
        check = StaticCheck("core.x")
        assert getattr(check, builder)("d").status is status


class TestRunWrapper:
    def test_exception_becomes_warning(self, caplog):
        check = StaticCheck("core.flaky", category="system", error=RuntimeError("disk on fire"))
        with caplog.at_level(logging.WARNING):
            result = check.run()
        assert result.status is HealthStatus.WARNING
        assert result.slug == "core.flaky"
        assert result.category == "system"
        assert "disk on fire" in result.description
        assert "core.flaky" in caplog.text

    def test_exception_without_message_uses_type_name(self):
        result = StaticCheck("core.x", error=KeyError()).run()
        assert "KeyError" in result.description

    def test_broken_accessor_still_yields_result(self):
        result = BrokenIdentity().run()
        assert result.status is HealthStatus.WARNING
        assert result.slug == "core.broken_identity"
        assert result.category == "uncategorised"
        assert "probe failed" in result.description

    @pytest.mark.skipif(sys.version_info < (3, 11), reason="typing.final sets __final__ from 3.11")
    def test_run_is_marked_final(self):
        assert getattr(HealthCheck.run, "__final__", False) is True


class TestResources:
    def test_missing_required_resource_is_a_warning(self):
        check = NeedsDatabase()
        check.bind({})
        result = check.run()
        assert result.status is HealthStatus.WARNING
        assert "database" in result.description

    def test_bound_resources_are_visible(self):
        check = NeedsDatabase()
        check.bind({"database": "DB", "http_client": "HTTP", "unrelated": "nope"})
        result = check.run()
        assert result.status is HealthStatus.GOOD
        assert result.description == "db=DB client=HTTP"
        assert check.resource("unrelated", None) is None

    def test_optional_resource_default(self):
        check = NeedsDatabase()
        check.bind({"database": "DB"})
        assert check.run().description == "db=DB client=None"

    def test_release_drops_resources(self):
        check = NeedsDatabase()
        check.bind({"database": "DB"})
        check.release()
        with pytest.raises(MissingDependencyError):
            check.resource("database")

    def test_none_resource_counts_as_missing(self):
        check = NeedsDatabase()
        check.bind({"database": None})
        assert check.run().status is HealthStatus.WARNING

    def test_release_on_another_thread_keeps_this_threads_binding(self):
        check = NeedsDatabase()
        check.bind({"database": "DB"})
        other = threading.Thread(target=check.release)
        other.start()
        other.join()
        assert check.resource("database") == "DB"
        assert check.run().status is HealthStatus.GOOD
