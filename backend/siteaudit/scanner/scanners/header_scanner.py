# siteaudit/scanner/scanners/header_scanner.py
"""
Security headers scanner.

One HEAD request (probe_headers) evaluated by the HeaderAuditor.

Unlike the credential scanner, a failed probe fails the whole scanner:
the exception propagates to BaseScanner.run(), which reports score 0 with a
single synthetic critical finding. No partial evaluation is attempted.

Config options:
    timeout: float  probe timeout in seconds (default: 10)
"""

from __future__ import annotations

import logging

import httpx

from siteaudit.scanner.analyzers.header_auditor import HeaderAuditor
from siteaudit.scanner.base import BaseScanner, ScannerResult
from siteaudit.scanner.engines.header_engine import PROBE_TIMEOUT, probe_headers

logger = logging.getLogger(__name__)


class HeaderScanner(BaseScanner):

    auditor = HeaderAuditor()

    @property
    def name(self) -> str:
        return "security"

    @property
    def scanner_type(self) -> str:
        return "security-headers"

    async def scan(self, target_url: str, client: httpx.AsyncClient) -> ScannerResult:
        timeout = float(self.config.get("timeout", PROBE_TIMEOUT))
        probe = await probe_headers(client, target_url, timeout=timeout)
        score, findings = self.auditor.evaluate(probe)

        # Cookie values can be live session tokens; report names only
        headers = dict(probe.headers)
        if "set-cookie" in headers:
            headers["set-cookie"] = ", ".join(f"{n}=<redacted>" for n in probe.cookie_names)

        return ScannerResult(
            scanner_type=self.scanner_type,
            score=score,
            findings=findings,
            url=target_url,
            details={"headers": headers},
        )
