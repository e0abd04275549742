# siteaudit/scanner/orchestrator.py
"""
Scan Orchestrator: runs every requested scanner against one target.

Pipeline:

    1. Normalize and validate the target URL (fails fast: ScanRequestError)
    2. Resolve requested scanner tags (default: every known scanner)
    3. Run all scanners concurrently over one shared AsyncClient
    4. Wait for every scanner to settle, success or failure
    5. Aggregate per-scanner scores into the overall score
    6. Return an immutable AggregateReport

Isolation: each scanner task converts its own failure into a zero-score
ScannerResult with an error. Nothing a scanner does can abort its siblings
or the scan. The only errors that escape are upfront validation errors,
raised before any scanner starts.

Usage from scan/routes.py:
    from siteaudit.scanner import ScanOrchestrator

    orchestrator = ScanOrchestrator()
    report = orchestrator.execute("example.com", ["security", "api_keys"])
    # report.to_dict() is the JSON response body
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

import httpx

from siteaudit.scanner.base import (
    AggregateReport,
    BaseScanner,
    ScannerResult,
    build_client,
    describe_error,
    failed_result,
    now_utc,
)
from siteaudit.scanner.scanners import available_scanners
from siteaudit.utils.scoring import calc_overall_score

logger = logging.getLogger(__name__)


class ScanRequestError(ValueError):
    """The scan request is invalid. Raised before any scanner runs."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def normalize_url(raw: str) -> str:
    """
    Prefix https:// unless the string already begins with "http".
    Idempotent: normalize_url(normalize_url(x)) == normalize_url(x).
    """
    url = (raw or "").strip()
    if not url:
        return url
    return url if url.startswith("http") else f"https://{url}"


def validate_target(raw: Any) -> str:
    """
    Normalize a raw target and check it is a URL the scanners can request:
    http(s) scheme, a host without whitespace, a port in range.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ScanRequestError("URL is required")

    url = normalize_url(raw)
    try:
        # httpx rejects what it would refuse to send (control characters, bad IDNA);
        # urlparse range-checks the port
        httpx.URL(url)
        parsed = urlparse(url)
        parsed.port
    except (httpx.InvalidURL, ValueError) as e:
        raise ScanRequestError(f"Invalid URL: {e}")

    host = parsed.hostname or ""
    if parsed.scheme not in ("http", "https") or not host or any(c.isspace() for c in host):
        raise ScanRequestError(f"Invalid URL: {raw.strip()}")
    return url


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class ScanOrchestrator:
    """
    Coordinates one scan across many scanners.

    Holds no per-scan state: the same instance can serve concurrent scans.

    Args:
        scanners: Known scanners keyed by tag. Defaults to available_scanners().
        configs:  Per-tag config dicts, used only when building the default set.
    """

    def __init__(
        self,
        scanners: Optional[Dict[str, BaseScanner]] = None,
        configs: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        self.scanners: Dict[str, BaseScanner] = (
            dict(scanners) if scanners is not None else available_scanners(configs)
        )

    @property
    def known_tags(self) -> List[str]:
        return list(self.scanners)

    def resolve_tags(self, scanner_types: Optional[Iterable[str]]) -> List[str]:
        """Requested tags in request order, deduplicated. None → all known."""
        if scanner_types is None:
            return self.known_tags
        if isinstance(scanner_types, str):
            raise ScanRequestError("scanTypes must be a list of scanner names")

        tags: List[str] = []
        for tag in scanner_types:
            if not isinstance(tag, str):
                raise ScanRequestError("scanTypes must be a list of scanner names")
            if tag not in self.scanners:
                raise ScanRequestError(
                    f"Unknown scanner '{tag}'. Known scanners: {', '.join(self.known_tags)}"
                )
            if tag not in tags:
                tags.append(tag)

        if not tags:
            raise ScanRequestError("scanTypes must name at least one scanner")
        return tags

    def execute(
        self,
        url: str,
        scanner_types: Optional[Iterable[str]] = None,
    ) -> AggregateReport:
        """Blocking entry point for sync callers (Flask views, CLI)."""
        return asyncio.run(self.scan(url, scanner_types))

    async def scan(
        self,
        url: str,
        scanner_types: Optional[Iterable[str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> AggregateReport:
        """
        Run the requested scanners and build the report.

        Raises:
            ScanRequestError: invalid URL or scanner list. Nothing else.
        """
        target = validate_target(url)
        tags = self.resolve_tags(scanner_types)
        start = time.monotonic()

        logger.info(f"Scan started for {target}: {', '.join(tags)}")

        if client is None:
            async with build_client() as own_client:
                results = await self._run_all(target, tags, own_client)
        else:
            results = await self._run_all(target, tags, client)

        overall = calc_overall_score(results)
        failed = [tag for tag, r in results.items() if r.failed]

        logger.info(
            f"Scan completed for {target} in {time.monotonic() - start:.2f}s: "
            f"overall={overall}"
            + (f", failed scanners: {', '.join(failed)}" if failed else "")
        )

        return AggregateReport(
            url=target,
            overall_score=overall,
            results=results,
            completed_at=now_utc(),
        )

    async def _run_all(
        self,
        target: str,
        tags: List[str],
        client: httpx.AsyncClient,
    ) -> Dict[str, ScannerResult]:
        outcomes = await asyncio.gather(
            *(self._run_isolated(tag, target, client) for tag in tags)
        )
        return dict(zip(tags, outcomes))

    async def _run_isolated(
        self,
        tag: str,
        target: str,
        client: httpx.AsyncClient,
    ) -> ScannerResult:
        """
        BaseScanner.run() already never raises; this guards scanners that
        override run() or misbehave in ways the base class cannot see.
        """
        scanner = self.scanners[tag]
        try:
            result = await scanner.run(target, client)
            if not isinstance(result, ScannerResult):
                raise TypeError(f"scanner returned {type(result).__name__}, expected ScannerResult")
            return result
        except Exception as e:
            logger.exception(f"Scanner '{tag}' crashed outside its own error handling")
            return failed_result(scanner.scanner_type, describe_error(e), url=target)
