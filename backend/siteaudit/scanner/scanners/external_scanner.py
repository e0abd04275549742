# siteaudit/scanner/scanners/external_scanner.py
"""
External (opaque) scanners.

Some checks live behind an HTTP function owned by another team and backed
by a hosted language model: legal-compliance review and AI-authorship
("vibe") detection. From this engine's point of view they are black boxes
that accept {"targetUrl": ...} and answer with the uniform scanner shape:

    {
        "scannerType": "legal-scanner",
        "score": 72,
        "findings": [{"id": ..., "severity": ..., "title": ..., "description": ...}],
        "scannedAt": "2026-01-01T00:00:00Z"
    }

Anything else is a malformed upstream response and fails the scanner:
HTTP status >= 400, a body that is not a JSON object, an "error" field,
a missing or non-numeric "score", a missing or non-list "findings".

Environment:
    SCANNER_FUNCTIONS_URL    base URL; functions live at /functions/v1/<name>.
                             External scanners are only registered when set.
    SCANNER_FUNCTIONS_TOKEN  optional bearer token.

Config options:
    timeout: float  call timeout in seconds (default: 60)
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from siteaudit.scanner.base import (
    SEVERITIES,
    BaseScanner,
    Finding,
    ScannerResponseError,
    ScannerResult,
)
from siteaudit.utils.scoring import round_half_up

logger = logging.getLogger(__name__)

EXTERNAL_TIMEOUT = 60

# tag → (scannerType, function name)
EXTERNAL_FUNCTIONS = {
    "legal": ("legal-scanner", "legal-scanner"),
    "vibe": ("vibe-match", "vibe-scanner"),
}


def functions_base_url() -> Optional[str]:
    base = (os.getenv("SCANNER_FUNCTIONS_URL") or "").strip().rstrip("/")
    return base or None


class ExternalScanner(BaseScanner):
    """
    Stub over an outbound call. All the judgement happens upstream.
    """

    def __init__(
        self,
        tag: str,
        scanner_type: str,
        function: str,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(config)
        self._tag = tag
        self._scanner_type = scanner_type
        self.function = function
        self.base_url = (base_url or functions_base_url() or "").rstrip("/")
        self.token = token if token is not None else os.getenv("SCANNER_FUNCTIONS_TOKEN")

    @classmethod
    def for_tag(cls, tag: str, config: Optional[Dict[str, Any]] = None) -> "ExternalScanner":
        scanner_type, function = EXTERNAL_FUNCTIONS[tag]
        return cls(tag, scanner_type, function, config=config)

    @property
    def name(self) -> str:
        return self._tag

    @property
    def scanner_type(self) -> str:
        return self._scanner_type

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/functions/v1/{self.function}"

    async def scan(self, target_url: str, client: httpx.AsyncClient) -> ScannerResult:
        if not self.base_url:
            raise ScannerResponseError("SCANNER_FUNCTIONS_URL is not configured")

        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        timeout = float(self.config.get("timeout", EXTERNAL_TIMEOUT))
        response = await asyncio.wait_for(
            client.post(self.endpoint, json={"targetUrl": target_url}, headers=headers),
            timeout=timeout,
        )

        try:
            payload = response.json()
        except ValueError:
            raise ScannerResponseError(
                f"{self.function} returned non-JSON response (HTTP {response.status_code})"
            )

        if not isinstance(payload, dict):
            raise ScannerResponseError(f"{self.function} returned {type(payload).__name__}, expected object")
        if payload.get("error"):
            raise ScannerResponseError(str(payload["error"]))
        if response.status_code >= 400:
            raise ScannerResponseError(f"{self.function} returned HTTP {response.status_code}")

        score = payload.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ScannerResponseError(f"{self.function} response has no numeric score")

        raw_findings = payload.get("findings")
        if not isinstance(raw_findings, list):
            raise ScannerResponseError(f"{self.function} response has no findings list")

        return ScannerResult(
            scanner_type=self.scanner_type,
            score=round_half_up(score),
            findings=self._normalize_findings(raw_findings),
            url=target_url,
        )

    def _normalize_findings(self, raw_findings: List[Any]) -> List[Finding]:
        findings: List[Finding] = []
        used: set = set()

        for i, raw in enumerate(raw_findings):
            if not isinstance(raw, dict):
                raise ScannerResponseError(f"{self.function} returned a malformed finding at index {i}")

            severity = str(raw.get("severity") or "medium").lower()
            if severity not in SEVERITIES:
                severity = "medium"

            fid = str(raw.get("id") or f"{self._tag}-{i}")
            if fid in used:
                fid = f"{fid}-{i}"
            used.add(fid)

            findings.append(Finding(
                id=fid,
                severity=severity,
                title=str(raw.get("title") or "Untitled finding"),
                description=str(raw.get("description") or ""),
                recommendation=raw.get("recommendation"),
                location=raw.get("location"),
                evidence=raw.get("evidence"),
            ))

        return findings
