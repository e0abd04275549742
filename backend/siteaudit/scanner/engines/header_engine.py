# siteaudit/scanner/engines/header_engine.py
"""
Header probe engine.

Issues exactly one metadata-only (HEAD) request to the target, following
redirects, and records what the HeaderAuditor needs:

    {
        "url": "https://example.com/",      # resolved URL after redirects
        "scheme": "https",
        "status_code": 200,
        "headers": {"content-security-policy": "...", ...},   # lowercased keys
        "set_cookie": "session=abc; Secure; HttpOnly",         # or None
    }

No retries. Any transport error (DNS, refused, timeout) propagates: for the
header scanner a failed probe means the whole scan failed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import httpx

from siteaudit.scanner.base import BROWSER_USER_AGENT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = DEFAULT_TIMEOUT


@dataclass
class HeaderProbe:
    url: str
    scheme: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    set_cookie: Optional[str] = None

    @property
    def cookie_names(self) -> List[str]:
        """Cookie names only. Values may be session tokens."""
        names: List[str] = []
        if not self.set_cookie:
            return names
        for part in self.set_cookie.split(","):
            if "=" not in part:
                continue
            name = part.split("=", 1)[0].strip()
            # Skip "Expires=Wed, 21 Oct ..." fragments split on the date comma
            if name and ";" not in name and " " not in name and name not in names:
                names.append(name)
        return names


async def probe_headers(
    client: httpx.AsyncClient,
    url: str,
    timeout: float = PROBE_TIMEOUT,
) -> HeaderProbe:
    """
    HEAD the target and return its resolved URL and response headers.

    Raises httpx.HTTPError or asyncio.TimeoutError on failure.
    """
    response = await asyncio.wait_for(
        client.head(
            url,
            headers={"User-Agent": BROWSER_USER_AGENT},
            follow_redirects=True,
        ),
        timeout=timeout,
    )

    headers = {k.lower(): v for k, v in response.headers.items()}
    cookies = response.headers.get_list("set-cookie")

    probe = HeaderProbe(
        url=str(response.url),
        scheme=response.url.scheme,
        status_code=response.status_code,
        headers=headers,
        set_cookie=", ".join(cookies) if cookies else None,
    )
    logger.debug(
        f"HeaderProbe: {url} → {probe.url} ({probe.status_code}), "
        f"{len(headers)} header(s)"
    )
    return probe
