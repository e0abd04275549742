# siteaudit/scanner/base.py
"""
Base classes for the site audit scan engine.

Architecture:
    ScanOrchestrator fans out to Scanners, each Scanner pairs:

Engines:   Collect raw data from the target (page sources, response headers).
           Engines NEVER classify severity; they only gather facts.

Analyzers: Interpret engine data and produce Findings with severity and
           remediation guidance. Analyzers NEVER touch the network.

Scanners:  One uniform contract over heterogeneous implementations:
               run(target_url) -> ScannerResult
           Internal scanners (credentials, headers) combine an engine with an
           analyzer. External scanners delegate to an opaque HTTP function.

A scanner never raises out of run(). Whatever goes wrong inside scan()
becomes a ScannerResult with score 0, an error message and a single
synthetic critical finding, so one failing scanner never sinks a scan.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

# Ordered, most severe first
SEVERITIES = ("critical", "high", "medium", "low", "info")

DEFAULT_TIMEOUT = 10

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_utc() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def severity_rank(severity: str) -> int:
    """0 for critical, 4 for info, 5 for anything unknown."""
    try:
        return SEVERITIES.index((severity or "").lower())
    except ValueError:
        return len(SEVERITIES)


def build_client(**kwargs: Any) -> httpx.AsyncClient:
    """AsyncClient with the defaults every scanner expects."""
    kwargs.setdefault("timeout", httpx.Timeout(DEFAULT_TIMEOUT))
    kwargs.setdefault("follow_redirects", True)
    return httpx.AsyncClient(**kwargs)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ScannerError(Exception):
    """A scanner could not complete."""


class ScannerResponseError(ScannerError):
    """An upstream service answered with something we cannot use."""


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class Finding:
    """
    One detected issue.

    Fields:
        id:             Unique within a single scanner's finding list,
                        e.g. "missing-content-security-policy", "leak-aws-access-key-0".
        severity:       One of: critical, high, medium, low, info.
        title:          Human-readable title shown in the dashboard.
        description:    What was found.
        recommendation: How to fix it.
        location:       Where it was found (fetched resource, resolved URL).
        evidence:       Redacted excerpt. Never a usable credential.
    """
    id: str
    severity: str
    title: str
    description: str
    recommendation: Optional[str] = None
    location: Optional[str] = None
    evidence: Optional[str] = None

    def __post_init__(self):
        self.severity = (self.severity or "").lower()
        if self.severity not in SEVERITIES:
            raise ValueError(f"Unknown severity '{self.severity}' for finding '{self.id}'")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "severity": self.severity,
            "title": self.title,
            "description": self.description,
        }
        for key in ("recommendation", "location", "evidence"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class ScannerResult:
    """
    Standardized output from any scanner run.

    Fields:
        scanner_type: Which scanner produced this (e.g. "security-headers").
        score:        0-100, 100 = no issues. Independent of len(findings):
                      a scanner may score below 100 from a signal it does
                      not enumerate as findings.
        findings:     Discovery order, not sorted.
        scanned_at:   When the scanner finished.
        error:        Set when the scanner could not complete.
        url:          The target that was scanned.
        degraded:     True when the result came from a fallback path that
                      could not measure everything the primary path does.
        details:      Scanner-specific extras merged into the serialized
                      record (sourcesScanned, headers, scores, ...).
    """
    scanner_type: str
    score: int = 100
    findings: List[Finding] = field(default_factory=list)
    scanned_at: datetime = field(default_factory=now_utc)
    error: Optional[str] = None
    url: Optional[str] = None
    degraded: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.score = max(0, min(100, int(self.score)))

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = dict(self.details)
        data.update({
            "scannerType": self.scanner_type,
            "score": self.score,
            "findings": [f.to_dict() for f in self.findings],
            "scannedAt": self.scanned_at.isoformat(),
        })
        if self.url is not None:
            data["url"] = self.url
        if self.error is not None:
            data["error"] = self.error
        if self.degraded:
            data["degraded"] = True
        return data


@dataclass(frozen=True)
class AggregateReport:
    """
    The final combined output of one scan. Built once, never mutated.
    """
    url: str
    overall_score: int
    results: Mapping[str, ScannerResult]
    completed_at: datetime = field(default_factory=now_utc)

    def __post_init__(self):
        object.__setattr__(self, "results", MappingProxyType(dict(self.results)))

    def to_dict(self) -> Dict[str, Any]:
        from siteaudit.utils.scoring import score_grade

        grade, _ = score_grade(self.overall_score)
        return {
            "url": self.url,
            "overallScore": self.overall_score,
            "grade": grade,
            "results": {tag: r.to_dict() for tag, r in self.results.items()},
            "completedAt": self.completed_at.isoformat(),
        }


def failed_result(scanner_type: str, error: str, url: Optional[str] = None) -> ScannerResult:
    """
    The result a scanner reports when it could not complete:
    score 0, the error message, and one synthetic critical finding.
    """
    return ScannerResult(
        scanner_type=scanner_type,
        score=0,
        error=error,
        url=url,
        findings=[Finding(
            id="scan-failed",
            severity="critical",
            title="Scan failed",
            description=f"Could not scan the target: {error}",
            recommendation="Verify the URL is accessible and try again.",
        )],
    )


def describe_error(exc: BaseException) -> str:
    """Short human-readable error text. Timeouts often stringify to ''."""
    message = str(exc).strip()
    if not message:
        return type(exc).__name__
    return message


# ---------------------------------------------------------------------------
# Abstract base class
# ---------------------------------------------------------------------------

class BaseScanner(ABC):
    """
    Abstract base for scanners.

    To create a new scanner:
        1. Subclass BaseScanner
        2. Set the `name` property (the request tag, e.g. "security")
        3. Set the `scanner_type` property (e.g. "security-headers")
        4. Implement `async scan(target_url, client) -> ScannerResult`

    The base class handles automatically:
        - Opening an HTTP client when the caller does not supply one
        - Timing (logged per run)
        - Error catching (exceptions become a failed ScannerResult)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config: Dict[str, Any] = dict(config or {})

    @property
    @abstractmethod
    def name(self) -> str:
        """Request tag. Key of this scanner in AggregateReport.results."""
        ...

    @property
    @abstractmethod
    def scanner_type(self) -> str:
        """Identifying tag written into ScannerResult.scanner_type."""
        ...

    async def run(
        self,
        target_url: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> ScannerResult:
        """
        Execute the scanner with automatic timing and error handling.

        DO NOT OVERRIDE THIS METHOD. Override `scan()` instead.

        Always returns a ScannerResult, even on failure.
        """
        start = time.monotonic()
        try:
            if client is None:
                async with build_client() as own_client:
                    result = await self.scan(target_url, own_client)
            else:
                result = await self.scan(target_url, client)
            result.scanner_type = self.scanner_type
            if result.url is None:
                result.url = target_url
        except Exception as e:
            logger.exception(f"Scanner '{self.name}' failed for {target_url}")
            result = failed_result(self.scanner_type, describe_error(e), url=target_url)

        logger.info(
            f"Scanner '{self.name}' finished in {time.monotonic() - start:.2f}s: "
            f"score={result.score}, findings={len(result.findings)}"
            + (f", error={result.error}" if result.error else "")
        )
        return result

    @abstractmethod
    async def scan(self, target_url: str, client: httpx.AsyncClient) -> ScannerResult:
        """
        Perform the actual scan. Override this in subclasses.

        Args:
            target_url: Normalized target, always with a scheme.
            client:     Shared AsyncClient (redirects followed). Pass a
                        per-request timeout for anything time-bounded.

        Raise freely: the base class turns exceptions into a failed result.
        """
        ...
