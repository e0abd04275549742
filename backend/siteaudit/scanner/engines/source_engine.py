# siteaudit/scanner/engines/source_engine.py
"""
Source collection engine.

Fetches the target page plus a bounded set of its linked scripts and hands
back every text blob worth scanning for leaked credentials, tagged with
where it came from.

What this engine collects (in this order):
    1. The page HTML                      location "HTML source"
    2. Up to 5 external <script src=...>  location = absolute script URL
       (third-party CDN scripts skipped, fetched concurrently)
    3. Inline <script> blocks > 50 chars  location "Inline script #N"

No JavaScript is executed; only static markup and script text is read.

Failure policy:
    - Page fetch fails → return whatever was collected (usually nothing).
      An unreachable target is not itself a leak.
    - A script fetch fails, times out or is oversized → silently dropped.

Config options:
    page_timeout:      float  page fetch timeout in seconds (default: 10)
    script_timeout:    float  per-script fetch timeout in seconds (default: 5)
    max_scripts:       int    external scripts to fetch (default: 5)
    max_script_chars:  int    larger scripts are discarded (default: 500000)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from siteaudit.scanner.base import BROWSER_USER_AGENT

logger = logging.getLogger(__name__)

PAGE_TIMEOUT = 10
SCRIPT_TIMEOUT = 5
MAX_SCRIPTS = 5
MAX_SCRIPT_CHARS = 500_000
MIN_INLINE_SCRIPT_CHARS = 50

# Substring match against the script URL. Vendored libraries served from
# public CDNs are not the site's own code.
CDN_DENYLIST = (
    "cdn.",
    "cdnjs.",
    "unpkg.com",
    "jsdelivr.net",
    "googletagmanager.com",
    "google-analytics.com",
)

REQUEST_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


@dataclass(frozen=True)
class Source:
    """One text blob to scan, tagged with its origin."""
    content: str
    location: str


# Raw HTML or an already parsed page
Markup = Union[str, BeautifulSoup]


def parse_page(page: Markup) -> BeautifulSoup:
    """Parse HTML once; an already parsed page is returned as is."""
    if isinstance(page, BeautifulSoup):
        return page
    return BeautifulSoup(page, "html.parser")


def is_third_party_cdn(script_url: str) -> bool:
    lowered = script_url.lower()
    return any(marker in lowered for marker in CDN_DENYLIST)


def extract_script_urls(page: Markup, base_url: str, limit: int = MAX_SCRIPTS) -> List[str]:
    """
    Absolute URLs of first-party <script src> references, in document order.

    Relative and protocol-relative references are resolved against base_url.
    Stops after `limit` accepted references.
    """
    soup = parse_page(page)
    urls: List[str] = []

    for tag in soup.find_all("script", src=True):
        if len(urls) >= limit:
            break
        src = (tag.get("src") or "").strip()
        if not src or is_third_party_cdn(src):
            continue

        resolved = urljoin(base_url, src)
        if not resolved.startswith(("http://", "https://")):
            continue
        if resolved not in urls:
            urls.append(resolved)

    return urls


def extract_inline_scripts(page: Markup, min_chars: int = MIN_INLINE_SCRIPT_CHARS) -> List[Source]:
    """
    Inline <script> bodies longer than min_chars, numbered by their ordinal
    position among the page's inline scripts.
    """
    soup = parse_page(page)
    sources: List[Source] = []
    ordinal = 0

    for tag in soup.find_all("script"):
        if tag.get("src"):
            continue
        content = tag.string or tag.get_text() or ""
        if not content:
            continue
        ordinal += 1
        if len(content) > min_chars:
            sources.append(Source(content=content, location=f"Inline script #{ordinal}"))

    return sources


class SourceCollector:
    """
    One fetch pass over a target. Create one per scan.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[Dict[str, Any]] = None):
        config = config or {}
        self.client = client
        self.page_timeout = float(config.get("page_timeout", PAGE_TIMEOUT))
        self.script_timeout = float(config.get("script_timeout", SCRIPT_TIMEOUT))
        self.max_scripts = int(config.get("max_scripts", MAX_SCRIPTS))
        self.max_script_chars = int(config.get("max_script_chars", MAX_SCRIPT_CHARS))

    async def collect(self, url: str) -> List[Source]:
        sources: List[Source] = []

        # --- 1. Page ---
        try:
            response = await asyncio.wait_for(
                self.client.get(url, headers=REQUEST_HEADERS, follow_redirects=True),
                timeout=self.page_timeout,
            )
            html = response.text
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
            logger.info(f"SourceCollector: page fetch failed for {url}: {type(e).__name__}: {e}")
            return sources

        sources.append(Source(content=html, location="HTML source"))
        base_url = str(response.url)

        # --- 2. External scripts ---
        soup = parse_page(html)
        script_urls = extract_script_urls(soup, base_url, limit=self.max_scripts)
        if script_urls:
            semaphore = asyncio.Semaphore(self.max_scripts)
            fetched = await asyncio.gather(
                *(self._fetch_script(semaphore, u) for u in script_urls)
            )
            sources.extend(s for s in fetched if s is not None)

        # --- 3. Inline scripts ---
        sources.extend(extract_inline_scripts(soup))

        logger.info(
            f"SourceCollector: {len(sources)} source(s) from {url} "
            f"({len(script_urls)} external script(s) referenced)"
        )
        return sources

    async def _fetch_script(self, sem: asyncio.Semaphore, script_url: str) -> Optional[Source]:
        async with sem:
            try:
                response = await asyncio.wait_for(
                    self.client.get(script_url, headers=REQUEST_HEADERS, follow_redirects=True),
                    timeout=self.script_timeout,
                )
                content = response.text
            except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
                logger.debug(f"SourceCollector: dropped script {script_url}: {type(e).__name__}: {e}")
                return None

        if len(content) > self.max_script_chars:
            logger.debug(
                f"SourceCollector: dropped script {script_url}: "
                f"{len(content)} chars exceeds {self.max_script_chars}"
            )
            return None

        return Source(content=content, location=script_url)
