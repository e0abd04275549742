# siteaudit/scanner/analyzers/credential_detector.py
"""
Credential Leak Detector.

Scans collected page sources against the signature catalog and produces
properly classified, redacted Findings.

For each source, for each signature, every non-overlapping match is a
candidate. A candidate becomes a finding only if:
    1. The exact literal was not already reported in this scan
       (across sources AND signatures).
    2. Entropy-gated signatures: Shannon entropy >= 4.0 bits/char.
       Kills English words, repeated filler and other non-random text
       that happens to fit a generic 40-char shape.
    3. Signatures with a validator: the predicate holds.

Evidence is always redact(secret). The raw secret is never written to any
finding field or log line.

The seen-secrets set belongs to a single detect() call, so one detector
instance can serve concurrent scans.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set

from siteaudit.scanner.base import Finding
from siteaudit.scanner.engines.source_engine import Source
from siteaudit.scanner.signatures import SIGNATURES, CredentialSignature

logger = logging.getLogger(__name__)

ENTROPY_THRESHOLD = 4.0
REDACTED_PLACEHOLDER = "***REDACTED***"
REDACT_MIN_LENGTH = 12

RECOMMENDATION = (
    "Immediately revoke this key and generate a new one. Never expose secret "
    "keys in client-side code. Use environment variables and server-side API "
    "routes instead."
)


def shannon_entropy(text: str) -> float:
    """Shannon entropy in bits per character. Empty string → 0.0."""
    if not text:
        return 0.0
    length = len(text)
    return -sum(
        (count / length) * math.log2(count / length)
        for count in Counter(text).values()
    )


def redact_secret(secret: str) -> str:
    """
    Short secrets are replaced outright; longer ones keep the first 6 and
    last 4 characters so the owner can recognise which key leaked.
    """
    if len(secret) <= REDACT_MIN_LENGTH:
        return REDACTED_PLACEHOLDER
    redacted = f"{secret[:6]}...{secret[-4:]}"
    if redacted == secret:
        return REDACTED_PLACEHOLDER
    return redacted


def _slug(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


class CredentialDetector:
    """
    Matches sources against a signature catalog.

    The catalog defaults to the process-wide SIGNATURES table; pass a
    different sequence to scan for a custom set.
    """

    def __init__(
        self,
        signatures: Optional[Sequence[CredentialSignature]] = None,
        entropy_threshold: float = ENTROPY_THRESHOLD,
    ):
        self.signatures = tuple(SIGNATURES if signatures is None else signatures)
        self.entropy_threshold = entropy_threshold

    def detect(self, sources: Iterable[Source]) -> List[Finding]:
        findings: List[Finding] = []
        seen: Set[str] = set()

        for source in sources:
            for sig in self.signatures:
                for match in sig.pattern.finditer(source.content):
                    secret = match.group(0)
                    if not self._accept(sig, secret, seen):
                        continue

                    seen.add(secret)
                    findings.append(self._build_finding(sig, secret, source, len(findings)))

        if findings:
            logger.info(
                f"CredentialDetector: {len(findings)} finding(s) - "
                f"{sum(1 for f in findings if f.severity == 'critical')} critical, "
                f"{sum(1 for f in findings if f.severity == 'high')} high"
            )
        return findings

    def _accept(self, sig: CredentialSignature, secret: str, seen: Set[str]) -> bool:
        if secret in seen:
            return False
        if sig.requires_entropy_check and shannon_entropy(secret) < self.entropy_threshold:
            return False
        return sig.accepts(secret)

    def _build_finding(
        self,
        sig: CredentialSignature,
        secret: str,
        source: Source,
        ordinal: int,
    ) -> Finding:
        return Finding(
            id=f"leak-{_slug(sig.name)}-{ordinal}",
            severity=sig.severity,
            title=f"Exposed {sig.name}",
            description=(
                f"Found a potential {sig.name} exposed in client-side code. "
                "This could allow attackers to access your services."
            ),
            recommendation=RECOMMENDATION,
            location=source.location,
            evidence=redact_secret(secret),
        )
