"""Core plugin settings — loads checks.yaml.

Example file::

    disabled:
      - core.debug_mode
    disk:
      path: /var/lib/app
      warn_percent: 15
      critical_percent: 5
    probes:
      - id: homepage
        type: http
        url: https://example.com/health
        expected_status: 200
      - id: example
        type: tls
        hostname: example.com
        warn_days_before: 14
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

PROBE_TYPES = ("http", "tls", "dns", "tcp")


@dataclass
class ProbeDef:
    """Definition of one network probe."""

    id: str
    type: str  # http | tls | dns | tcp
    url: str = ""
    hostname: str = ""
    port: int = 443
    method: str = "GET"
    expected_status: int = 200
    timeout_ms: int = 10_000
    slow_ms: int = 3_000  # http: degrade above this latency
    warn_days_before: int = 14  # tls


@dataclass
class DiskConfig:
    path: str = "/"
    warn_percent: float = 15.0
    critical_percent: float = 5.0


@dataclass
class CoreChecksConfig:
    disabled: set[str] = field(default_factory=set)
    disk: DiskConfig = field(default_factory=DiskConfig)
    probes: list[ProbeDef] = field(default_factory=list)

    def is_enabled(self, slug: str) -> bool:
        return slug not in self.disabled


def load_checks_config(path: Path) -> CoreChecksConfig:
    """Parse the checks file. A missing or broken file yields the defaults."""
    if not path.exists():
        logger.info("Checks file not found: %s — using defaults", path)
        return CoreChecksConfig()

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to parse %s: %s", path, e)
        return CoreChecksConfig()

    if not isinstance(raw, dict):
        logger.error("Checks file %s must contain a mapping", path)
        return CoreChecksConfig()

    config = parse_checks_config(raw)
    logger.info(
        "Loaded checks file %s: %d probes, %d disabled checks",
        path, len(config.probes), len(config.disabled),
    )
    return config


def parse_checks_config(raw: dict[str, Any]) -> CoreChecksConfig:
    raw_disk = raw.get("disk") or {}
    disk = DiskConfig(
        path=str(raw_disk.get("path", "/")),
        warn_percent=float(raw_disk.get("warn_percent", 15.0)),
        critical_percent=float(raw_disk.get("critical_percent", 5.0)),
    )

    probes = []
    for entry in raw.get("probes") or []:
        try:
            probes.append(_parse_probe(entry))
        except Exception as e:
            logger.warning("Skipping malformed probe entry: %s", e)

    return CoreChecksConfig(
        disabled={str(s) for s in raw.get("disabled") or []},
        disk=disk,
        probes=probes,
    )


def _parse_probe(raw: dict[str, Any]) -> ProbeDef:
    probe_type = raw.get("type", "http")
    if probe_type not in PROBE_TYPES:
        raise ValueError(f"unknown probe type '{probe_type}'")
    probe_id = str(raw["id"]).strip()
    if not probe_id:
        raise ValueError("probe 'id' is required")

    probe = ProbeDef(
        id=probe_id,
        type=probe_type,
        url=raw.get("url", ""),
        hostname=raw.get("hostname", ""),
        port=int(raw.get("port", 443)),
        method=raw.get("method", "GET"),
        expected_status=int(raw.get("expected_status", 200)),
        timeout_ms=int(raw.get("timeout_ms", 10_000)),
        slow_ms=int(raw.get("slow_ms", 3_000)),
        warn_days_before=int(raw.get("warn_days_before", 14)),
    )
    if probe.type == "http" and not probe.url:
        raise ValueError(f"http probe '{probe_id}' needs a url")
    if probe.type != "http" and not probe.hostname:
        raise ValueError(f"{probe.type} probe '{probe_id}' needs a hostname")
    return probe
