# siteaudit/scanner/scanners/seo_scanner.py
"""
SEO scanner.

Primary path: Google PageSpeed Insights v5 (SEO, performance, accessibility,
best practices). Fallback: fetch the page and run the local on-page checks.

A fallback result is marked degraded: it cannot measure three of the four
categories (reported as null, not 0), so the aggregate leaves it out of the
overall mean whenever a fully measured result is available.

If both paths fail the scanner fails, with both errors in the message.

Config options:
    pagespeed_timeout: float  PageSpeed API timeout in seconds (default: 60)
    page_timeout:      float  fallback page fetch timeout (default: 10)

Environment:
    PAGESPEED_API_KEY  optional; raises the PageSpeed quota.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Dict

import httpx

from siteaudit.scanner.analyzers.seo_analyzer import (
    MAX_RECOMMENDATIONS,
    SEOAnalysis,
    analyze_page,
    parse_pagespeed,
)
from siteaudit.scanner.base import (
    BROWSER_USER_AGENT,
    BaseScanner,
    ScannerError,
    ScannerResult,
    describe_error,
)

logger = logging.getLogger(__name__)

PAGESPEED_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
PAGESPEED_TIMEOUT = 60
PAGE_TIMEOUT = 10


class SEOScanner(BaseScanner):

    @property
    def name(self) -> str:
        return "seo"

    @property
    def scanner_type(self) -> str:
        return "seo"

    async def scan(self, target_url: str, client: httpx.AsyncClient) -> ScannerResult:
        try:
            analysis = await self._run_pagespeed(target_url, client)
        except (
            httpx.HTTPError, asyncio.TimeoutError, ScannerError,
            KeyError, TypeError, ValueError, AttributeError,
        ) as api_error:
            api_msg = describe_error(api_error)
            logger.warning(f"SEOScanner: PageSpeed failed for {target_url}, falling back to local analysis: {api_msg}")
            try:
                analysis = await self._run_local(target_url, client)
            except (httpx.HTTPError, asyncio.TimeoutError, ScannerError) as local_error:
                raise ScannerError(
                    f"Scan failed. API Error: {api_msg}. Local Error: {describe_error(local_error)}"
                ) from local_error

            analysis.audits.append({
                "title": "Scan Method",
                "score": None,
                "description": "Used local analysis fallback because the PageSpeed API failed.",
                "displayValue": f"API Error: {api_msg[:50]}",
            })

        return self._to_result(target_url, analysis)

    async def _run_pagespeed(self, target_url: str, client: httpx.AsyncClient) -> SEOAnalysis:
        params: Dict[str, Any] = {
            "url": target_url,
            "category": ["seo", "performance", "accessibility", "best-practices"],
            "strategy": "desktop",
        }
        api_key = os.getenv("PAGESPEED_API_KEY")
        if api_key:
            params["key"] = api_key

        timeout = float(self.config.get("pagespeed_timeout", PAGESPEED_TIMEOUT))
        response = await asyncio.wait_for(client.get(PAGESPEED_URL, params=params), timeout=timeout)
        if response.status_code >= 400:
            raise ScannerError(f"API {response.status_code}: {response.text[:200]}")

        return parse_pagespeed(response.json())

    async def _run_local(self, target_url: str, client: httpx.AsyncClient) -> SEOAnalysis:
        timeout = float(self.config.get("page_timeout", PAGE_TIMEOUT))
        response = await asyncio.wait_for(
            client.get(
                target_url,
                headers={
                    "User-Agent": BROWSER_USER_AGENT,
                    "Accept": "text/html,application/xhtml+xml,application/xml",
                },
                follow_redirects=True,
            ),
            timeout=timeout,
        )
        if response.status_code >= 400:
            raise ScannerError(f"Failed to fetch URL ({response.status_code})")

        return analyze_page(response.text)

    def _to_result(self, target_url: str, analysis: SEOAnalysis) -> ScannerResult:
        return ScannerResult(
            scanner_type=self.scanner_type,
            score=analysis.score,
            findings=analysis.findings(),
            url=target_url,
            degraded=analysis.method != "pagespeed",
            details={
                "method": analysis.method,
                "scores": analysis.scores,
                "audits": analysis.audits,
                "recommendations": analysis.recommendations[:MAX_RECOMMENDATIONS],
            },
        )
