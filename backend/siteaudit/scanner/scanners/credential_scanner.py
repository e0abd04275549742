# siteaudit/scanner/scanners/credential_scanner.py
"""
API key leak scanner.

SourceCollector → CredentialDetector → severity-penalty score.

An unreachable target yields a valid result with sourcesScanned = 0 and no
findings: not being able to read the site is not evidence of a leak.
"""

from __future__ import annotations

import logging

import httpx

from siteaudit.scanner.analyzers.credential_detector import CredentialDetector
from siteaudit.scanner.base import BaseScanner, ScannerResult
from siteaudit.scanner.engines.source_engine import SourceCollector
from siteaudit.utils.scoring import calc_scanner_score

logger = logging.getLogger(__name__)


class CredentialScanner(BaseScanner):

    detector = CredentialDetector()

    @property
    def name(self) -> str:
        return "api_keys"

    @property
    def scanner_type(self) -> str:
        return "api-key-leak"

    async def scan(self, target_url: str, client: httpx.AsyncClient) -> ScannerResult:
        collector = SourceCollector(client, self.config)
        sources = await collector.collect(target_url)
        findings = self.detector.detect(sources)

        return ScannerResult(
            scanner_type=self.scanner_type,
            score=calc_scanner_score(findings),
            findings=findings,
            url=target_url,
            details={"sourcesScanned": len(sources)},
        )
