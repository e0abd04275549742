# siteaudit/scanner/analyzers/__init__.py
"""
Finding analyzers.
Each analyzer reads raw engine data and produces Findings
with proper severity classification and remediation guidance.
Analyzers do NOT collect data; they only interpret it.
"""
from siteaudit.scanner.analyzers.credential_detector import (
    CredentialDetector,
    redact_secret,
    shannon_entropy,
)
from siteaudit.scanner.analyzers.header_auditor import HEADER_POLICY, HeaderAuditor
from siteaudit.scanner.analyzers.seo_analyzer import SEOAnalysis, analyze_page, parse_pagespeed

__all__ = [
    "CredentialDetector", "redact_secret", "shannon_entropy",
    "HeaderAuditor", "HEADER_POLICY",
    "SEOAnalysis", "analyze_page", "parse_pagespeed",
]
