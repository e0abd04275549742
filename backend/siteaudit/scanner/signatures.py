# siteaudit/scanner/signatures.py
"""
Credential Signature Catalog.

Canonical list of every credential shape the credential detector looks for.
The detector iterates this table once per source; adding a signature never
requires touching detection logic.

Each signature defines:
    name:                   Human-readable key type, used in finding titles/ids.
    pattern:                Compiled regex. Every non-overlapping match is a candidate.
    severity:               critical, high, medium, low.
    requires_entropy_check: For generic, high false-positive shapes (bare
                            40-char base64 runs). Candidates below the entropy
                            threshold are dropped.
    validator:              Optional pure predicate over the matched text.
                            Candidates failing it are dropped.

The catalog is built once at import and is read-only (a tuple of frozen
dataclasses), so concurrent scans share it without locking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Pattern, Tuple


@dataclass(frozen=True)
class CredentialSignature:
    name: str
    pattern: Pattern[str]
    severity: str                               # critical, high, medium, low
    requires_entropy_check: bool = False
    validator: Optional[Callable[[str], bool]] = None

    def accepts(self, candidate: str) -> bool:
        """Run the additional validator, if any."""
        return self.validator is None or bool(self.validator(candidate))


def _is_service_role_token(token: str) -> bool:
    # Supabase anon keys share the JWT shape; only service_role keys bypass RLS
    return "service_role" in token


def _sig(name, pattern, severity, flags=0, **kwargs) -> CredentialSignature:
    return CredentialSignature(
        name=name,
        pattern=re.compile(pattern, flags),
        severity=severity,
        **kwargs,
    )


SIGNATURES: Tuple[CredentialSignature, ...] = (
    # ── AWS ──
    _sig("AWS Access Key", r"AKIA[0-9A-Z]{16}", "critical"),
    _sig(
        "AWS Secret Key",
        r"(?<![A-Za-z0-9/+=])[A-Za-z0-9/+=]{40}(?![A-Za-z0-9/+=])",
        "critical",
        requires_entropy_check=True,
    ),

    # ── Stripe ──
    _sig("Stripe Live Secret Key", r"sk_live_[a-zA-Z0-9]{24,}", "critical"),
    _sig("Stripe Test Secret Key", r"sk_test_[a-zA-Z0-9]{24,}", "medium"),
    _sig("Stripe Restricted Key", r"rk_live_[a-zA-Z0-9]{24,}", "critical"),

    # ── OpenAI ──
    _sig("OpenAI API Key", r"sk-[a-zA-Z0-9]{48}", "critical"),
    _sig("OpenAI Project Key", r"sk-proj-[a-zA-Z0-9]{48}", "critical"),

    # ── Google ──
    _sig("Google API Key", r"AIza[0-9A-Za-z_\-]{35}", "high"),
    _sig(
        "Google OAuth Client ID",
        r"[0-9]+-[0-9A-Za-z_]{32}\.apps\.googleusercontent\.com",
        "medium",
    ),

    # ── Firebase ──
    _sig(
        "Firebase API Key",
        r"""(?:apiKey|FIREBASE_API_KEY)\s*[:=]\s*['"](AIza[0-9A-Za-z_\-]{35})['"]""",
        "high",
        re.IGNORECASE,
    ),

    # ── GitHub ──
    _sig("GitHub Personal Access Token", r"ghp_[a-zA-Z0-9]{36}", "critical"),
    _sig("GitHub OAuth Token", r"gho_[a-zA-Z0-9]{36}", "critical"),
    _sig("GitHub App Token", r"ghu_[a-zA-Z0-9]{36}", "critical"),

    # ── Supabase ──
    _sig(
        "Supabase Service Role Key",
        r"eyJ[a-zA-Z0-9_\-]*\.eyJ[a-zA-Z0-9_\-]*\.[a-zA-Z0-9_\-]*",
        "high",
        validator=_is_service_role_token,
    ),

    # ── Databases ──
    _sig(
        "MongoDB Connection String",
        r"""mongodb(?:\+srv)?://[^:\s]+:[^@\s]+@[^\s'"]+""",
        "critical",
        re.IGNORECASE,
    ),
    _sig(
        "PostgreSQL Connection String",
        r"""postgres(?:ql)?://[^:\s]+:[^@\s]+@[^\s'"]+""",
        "critical",
        re.IGNORECASE,
    ),

    # ── Twilio ──
    _sig("Twilio API Key", r"SK[a-f0-9]{32}", "high"),
    _sig(
        "Twilio Auth Token",
        r"""twilio.*['"]\b[a-f0-9]{32}\b['"]""",
        "critical",
        re.IGNORECASE,
    ),

    # ── Slack ──
    _sig(
        "Slack Bot Token",
        r"xoxb-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24}",
        "critical",
    ),
    _sig(
        "Slack Webhook URL",
        r"https://hooks\.slack\.com/services/[A-Z0-9]+/[A-Z0-9]+/[a-zA-Z0-9]+",
        "high",
    ),

    # ── Email providers ──
    _sig("SendGrid API Key", r"SG\.[a-zA-Z0-9_\-]{22}\.[a-zA-Z0-9_\-]{43}", "critical"),
    _sig("Mailchimp API Key", r"[a-f0-9]{32}-us[0-9]{1,2}", "high"),

    # ── Private keys ──
    _sig(
        "Private Key",
        r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----",
        "critical",
    ),

    # ── Generic assignments ──
    _sig(
        "Generic API Key",
        r"""(?:api[_\-]?key|apikey)\s*[:=]\s*['"][a-zA-Z0-9_\-]{20,}['"]""",
        "medium",
        re.IGNORECASE,
    ),
    _sig(
        "Generic Secret",
        r"""(?:secret|password|passwd|pwd)\s*[:=]\s*['"][^'"]{8,}['"]""",
        "high",
        re.IGNORECASE,
    ),
)
