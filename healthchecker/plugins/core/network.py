"""Network probes — HTTP(S), TLS certificate expiry, DNS resolve, TCP connect.

One check instance per probe defined in the checks file. Outbound calls are
capped by the probe's ``timeout_ms`` (10s by default) on top of the runner's
own per-check timeout.
"""

from __future__ import annotations

import re
import socket
import ssl
import time
from datetime import datetime, timezone

import httpx

from healthchecker.checks.base import HealthCheck
from healthchecker.checks.result import CheckResult
from healthchecker.checks.status import HealthStatus
from healthchecker.plugins.core.config import ProbeDef


class ProbeCheck(HealthCheck):
    """Base for checks driven by a ``ProbeDef``."""

    kind = "probe"
    label = "Probe"

    def __init__(self, probe: ProbeDef) -> None:
        self.probe = probe

    @property
    def slug(self) -> str:
        return f"core.{self.kind}_{_slugify(self.probe.id)}"

    @property
    def category(self) -> str:
        return "connectivity"

    @property
    def title(self) -> str:
        return f"{self.label}: {self.probe.id}"

    @property
    def timeout(self) -> float:
        return self.probe.timeout_ms / 1000


class HttpEndpointCheck(ProbeCheck):
    """HTTP(S) request with expected status and a latency budget."""

    kind = "http"
    label = "HTTP endpoint"
    uses = frozenset({"http_client"})

    def action_url(self, status: HealthStatus | None = None) -> str | None:
        # Only link out when there is something to look at.
        if status is None or status is HealthStatus.GOOD:
            return None
        return self.probe.url

    def perform_check(self) -> CheckResult:
        url = self.probe.url
        t0 = time.perf_counter()
        try:
            client = self.resource("http_client", None)
            if client is not None:
                resp = client.request(self.probe.method, url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True, verify=True) as c:
                    resp = c.request(self.probe.method, url)
        except httpx.TimeoutException:
            return self.critical(f"{url} did not respond within {self.probe.timeout_ms}ms")
        except httpx.HTTPError as e:
            return self.critical(f"Could not reach {url}: {type(e).__name__}: {e}")
        latency = (time.perf_counter() - t0) * 1000

        if resp.status_code != self.probe.expected_status:
            return self.critical(
                f"{url} returned {resp.status_code}, expected {self.probe.expected_status}."
            )
        if latency > self.probe.slow_ms:
            return self.warning(
                f"{url} is up but slow: {latency:.0f}ms (budget {self.probe.slow_ms}ms)."
            )
        return self.good(f"{url} returned {resp.status_code} in {latency:.0f}ms.")


class TlsCertificateCheck(ProbeCheck):
    """Days until the server certificate expires."""

    kind = "tls"
    label = "TLS certificate"

    def perform_check(self) -> CheckResult:
        hostname, port = self.probe.hostname, self.probe.port
        try:
            cert = _fetch_certificate(hostname, port, self.timeout)
        except ssl.SSLCertVerificationError as e:
            return self.critical(f"Certificate for {hostname} failed verification: {e.verify_message}")
        except OSError as e:
            return self.critical(f"TLS connection to {hostname}:{port} failed: {type(e).__name__}: {e}")
        if not cert:
            return self.critical(f"{hostname}:{port} returned no certificate.")

        not_after = cert.get("notAfter", "")
        expiry = datetime.strptime(not_after, "%b %d %H:%M:%S %Y %Z").replace(tzinfo=timezone.utc)
        days_left = (expiry - datetime.now(timezone.utc)).days
        warn_days = self.probe.warn_days_before

        if days_left < 0:
            return self.critical(f"Certificate for {hostname} expired {-days_left} days ago.")
        if days_left < warn_days:
            return self.warning(
                f"Certificate for {hostname} expires in {days_left} days (warn below {warn_days})."
            )
        return self.good(f"Certificate for {hostname} is valid for another {days_left} days.")


class DnsResolveCheck(ProbeCheck):
    kind = "dns"
    label = "DNS resolution"

    def perform_check(self) -> CheckResult:
        hostname = self.probe.hostname
        try:
            addrs = socket.getaddrinfo(hostname, None)
        except socket.gaierror as e:
            return self.critical(f"{hostname} does not resolve: {e}")

        ips = sorted({a[4][0] for a in addrs})
        return self.good(f"{hostname} resolves to {', '.join(ips[:3])}.")


class TcpPortCheck(ProbeCheck):
    kind = "tcp"
    label = "TCP port"

    def perform_check(self) -> CheckResult:
        hostname, port = self.probe.hostname, self.probe.port
        try:
            sock = socket.create_connection((hostname, port), timeout=self.timeout)
        except OSError as e:
            return self.critical(f"Cannot connect to {hostname}:{port}: {type(e).__name__}: {e}")
        sock.close()
        return self.good(f"Port {port} on {hostname} is open.")


PROBE_CHECKS: dict[str, type[ProbeCheck]] = {
    "http": HttpEndpointCheck,
    "tls": TlsCertificateCheck,
    "dns": DnsResolveCheck,
    "tcp": TcpPortCheck,
}


def build_probe_check(probe: ProbeDef) -> ProbeCheck:
    return PROBE_CHECKS[probe.type](probe)


def _fetch_certificate(hostname: str, port: int, timeout: float) -> dict:
    ctx = ssl.create_default_context()
    with socket.create_connection((hostname, port), timeout=timeout) as sock:
        with ctx.wrap_socket(sock, server_hostname=hostname) as ssock:
            return ssock.getpeercert() or {}


def _slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9_]+", "_", value.lower()).strip("_") or "probe"
