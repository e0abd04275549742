# siteaudit/scanner/analyzers/header_auditor.py
"""
HTTP Security Headers Auditor.

Reads a HeaderProbe and scores the response against a weighted policy.

Scoring (start at 100, clamp to [0, 100] at the end):
    Missing policy header                     -weight   (severity per table)
    Strict-Transport-Security max-age < 1y    -5        medium
    X-Frame-Options not DENY / SAMEORIGIN     -5        low
    Resolved URL not HTTPS                    -25       critical
    Set-Cookie without "secure"               -10       medium

Weights:
    Content-Security-Policy    20  high
    Strict-Transport-Security  20  high
    X-Frame-Options            15  medium
    X-Content-Type-Options     10  medium
    Referrer-Policy            10  low
    Permissions-Policy         10  low
    X-XSS-Protection            5  low
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from siteaudit.scanner.base import Finding
from siteaudit.scanner.engines.header_engine import HeaderProbe

logger = logging.getLogger(__name__)

HSTS_MIN_MAX_AGE = 31536000  # one year
HSTS_WEAK_PENALTY = 5
XFO_WEAK_PENALTY = 5
NO_HTTPS_PENALTY = 25
INSECURE_COOKIE_PENALTY = 10

XFO_ALLOWED = ("DENY", "SAMEORIGIN")
MAX_AGE_RE = re.compile(r"max-age\s*=\s*\"?(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class HeaderPolicy:
    name: str
    weight: int
    severity: str
    description: str
    recommendation: str


# Order matters: findings are emitted in table order
HEADER_POLICY: Tuple[HeaderPolicy, ...] = (
    HeaderPolicy(
        name="Content-Security-Policy",
        weight=20,
        severity="high",
        description=(
            "The Content-Security-Policy (CSP) header is missing. CSP prevents "
            "cross-site scripting (XSS) and data injection attacks by controlling "
            "which resources the browser is allowed to load."
        ),
        recommendation=(
            "Add a Content-Security-Policy header. Start with a report-only policy "
            "to identify issues: Content-Security-Policy-Report-Only: default-src 'self'. "
            "Then tighten based on your application's needs."
        ),
    ),
    HeaderPolicy(
        name="Strict-Transport-Security",
        weight=20,
        severity="high",
        description=(
            "The Strict-Transport-Security (HSTS) header is missing. Without HSTS, "
            "users can be downgraded from HTTPS to HTTP via man-in-the-middle attacks."
        ),
        recommendation="Add: Strict-Transport-Security: max-age=31536000; includeSubDomains",
    ),
    HeaderPolicy(
        name="X-Frame-Options",
        weight=15,
        severity="medium",
        description=(
            "The X-Frame-Options header is missing. This allows the page to be "
            "embedded in iframes on other sites, enabling clickjacking attacks."
        ),
        recommendation=(
            "Add: X-Frame-Options: DENY (or SAMEORIGIN if you embed the page on "
            "your own site). CSP frame-ancestors is the modern replacement."
        ),
    ),
    HeaderPolicy(
        name="X-Content-Type-Options",
        weight=10,
        severity="medium",
        description=(
            "The X-Content-Type-Options header is missing. Browsers may MIME-sniff "
            "responses and treat non-script files as scripts."
        ),
        recommendation="Add: X-Content-Type-Options: nosniff",
    ),
    HeaderPolicy(
        name="Referrer-Policy",
        weight=10,
        severity="low",
        description=(
            "The Referrer-Policy header is missing. The full URL, including query "
            "parameters, may be sent to other sites as the Referer header."
        ),
        recommendation="Add: Referrer-Policy: strict-origin-when-cross-origin",
    ),
    HeaderPolicy(
        name="Permissions-Policy",
        weight=10,
        severity="low",
        description=(
            "The Permissions-Policy header is missing. Browser features such as "
            "camera, microphone and geolocation are not restricted."
        ),
        recommendation="Add: Permissions-Policy: camera=(), microphone=(), geolocation=()",
    ),
    HeaderPolicy(
        name="X-XSS-Protection",
        weight=5,
        severity="low",
        description="The legacy X-XSS-Protection header is missing (deprecated but still checked).",
        recommendation="Add: X-XSS-Protection: 0, and rely on Content-Security-Policy.",
    ),
)


def parse_hsts_max_age(value: str) -> int:
    """max-age in seconds; 0 when absent or unparseable."""
    match = MAX_AGE_RE.search(value or "")
    return int(match.group(1)) if match else 0


class HeaderAuditor:
    """
    Stateless: evaluate() is a pure function of the probe.
    """

    def __init__(self, policy: Optional[Tuple[HeaderPolicy, ...]] = None):
        self.policy = HEADER_POLICY if policy is None else policy

    def evaluate(self, probe: HeaderProbe) -> Tuple[int, List[Finding]]:
        """Returns (score, findings)."""
        findings: List[Finding] = []
        score = 100

        for rule in self.policy:
            value = probe.headers.get(rule.name.lower())

            if not value:
                score -= rule.weight
                findings.append(Finding(
                    id=f"missing-{rule.name.lower()}",
                    severity=rule.severity,
                    title=f"Missing {rule.name} header",
                    description=rule.description,
                    recommendation=rule.recommendation,
                    location=probe.url,
                ))
                continue

            # --- Present: secondary checks ---
            weak = self._check_weak_value(rule.name, value, probe.url)
            if weak:
                penalty, finding = weak
                score -= penalty
                findings.append(finding)

        # --- HTTPS ---
        if probe.scheme.lower() != "https":
            score -= NO_HTTPS_PENALTY
            findings.append(Finding(
                id="no-https",
                severity="critical",
                title="Site not using HTTPS",
                description=(
                    "The site is not served over HTTPS, exposing users to "
                    "man-in-the-middle attacks."
                ),
                recommendation="Configure your server to use HTTPS with a valid TLS certificate.",
                location=probe.url,
            ))

        # --- Cookies ---
        if probe.set_cookie and "secure" not in probe.set_cookie.lower():
            score -= INSECURE_COOKIE_PENALTY
            findings.append(Finding(
                id="insecure-cookies",
                severity="medium",
                title="Cookies without Secure flag",
                description=(
                    "Cookies are being set without the Secure flag and can be sent "
                    "over unencrypted HTTP connections."
                ),
                recommendation="Add the Secure flag to all cookies.",
                location=probe.url,
                evidence=", ".join(probe.cookie_names) or None,
            ))

        return max(0, min(100, score)), findings

    def _check_weak_value(
        self,
        header_name: str,
        value: str,
        url: str,
    ) -> Optional[Tuple[int, Finding]]:
        if header_name == "Strict-Transport-Security":
            max_age = parse_hsts_max_age(value)
            if max_age < HSTS_MIN_MAX_AGE:
                return HSTS_WEAK_PENALTY, Finding(
                    id="weak-hsts",
                    severity="medium",
                    title="Weak HSTS max-age",
                    description=(
                        f"HSTS max-age is {max_age} seconds. It should be at least "
                        f"1 year ({HSTS_MIN_MAX_AGE} seconds)."
                    ),
                    recommendation=f"Set max-age={HSTS_MIN_MAX_AGE} or higher.",
                    location=url,
                    evidence=value,
                )

        elif header_name == "X-Frame-Options":
            if value.strip().upper() not in XFO_ALLOWED:
                return XFO_WEAK_PENALTY, Finding(
                    id="weak-xfo",
                    severity="low",
                    title="Weak X-Frame-Options value",
                    description="X-Frame-Options should be DENY or SAMEORIGIN.",
                    recommendation="Set X-Frame-Options to DENY or SAMEORIGIN.",
                    location=url,
                    evidence=value,
                )

        return None
