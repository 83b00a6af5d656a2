"""Bundled extensions."""

from __future__ import annotations

from pathlib import Path

from healthchecker.collection import HealthCheckerExtension
from healthchecker.config import Settings
from healthchecker.plugins.core import CorePlugin
from healthchecker.plugins.example import ExamplePlugin


def default_extensions(settings: Settings, include_example: bool = False) -> list[HealthCheckerExtension]:
    """Extensions registered by the CLI and API server, in broadcast order."""
    extensions: list[HealthCheckerExtension] = [CorePlugin(config_path=Path(settings.checks_file))]
    if include_example:
        extensions.append(ExamplePlugin())
    return extensions
