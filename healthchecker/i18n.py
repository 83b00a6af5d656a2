"""Translation strings — label keys resolved to display text.

Checks, categories and statuses carry language keys rather than literal
text. ``text()`` resolves a key and returns the key itself when no string
is registered, so callers can detect a missing translation by comparing.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_DEFAULT_STRINGS: dict[str, str] = {
    "STATUS_CRITICAL": "Critical",
    "STATUS_WARNING": "Warning",
    "STATUS_GOOD": "Good",
    "CHECK_ERROR": "Check failed: %s",
    "CHECK_TIMEOUT": "Check did not finish within %s seconds and was abandoned.",
    "NO_CHECKS_AVAILABLE": "No health checks are available. Are the health checker extensions enabled?",
    "CATEGORY_SYSTEM": "System & Hosting",
    "CATEGORY_DATABASE": "Database",
    "CATEGORY_SECURITY": "Security",
    "CATEGORY_CONNECTIVITY": "Connectivity",
    "CATEGORY_PERFORMANCE": "Performance",
    "CATEGORY_THIRDPARTY": "Third Party",
}

_strings: dict[str, str] = dict(_DEFAULT_STRINGS)
_lock = threading.Lock()


def text(key: str, *args: Any) -> str:
    """Return the display string for ``key``, formatted with ``args``."""
    value = _strings.get(key, key)
    if args:
        try:
            return value % args
        except (TypeError, ValueError):
            logger.debug("Bad format arguments for %s", key)
            return value
    return value


def has(key: str) -> bool:
    return key in _strings


def register_strings(strings: dict[str, str]) -> None:
    """Add or override translation strings (later registrations win)."""
    with _lock:
        _strings.update({str(k): str(v) for k, v in strings.items()})


def load_strings(path: Path) -> int:
    """Load a flat ``KEY: text`` YAML mapping. Returns the number of strings loaded."""
    if not path.exists():
        logger.warning("Translations file not found: %s", path)
        return 0

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to parse %s: %s", path, e)
        return 0

    if not isinstance(raw, dict):
        logger.error("Translations file %s must contain a mapping", path)
        return 0

    register_strings(raw)
    logger.info("Loaded %d translation strings from %s", len(raw), path)
    return len(raw)


def reset_strings() -> None:
    """Restore the bundled strings (used by tests)."""
    with _lock:
        _strings.clear()
        _strings.update(_DEFAULT_STRINGS)
