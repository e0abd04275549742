# siteaudit/scanner/__init__.py
"""
Site Audit Scan Engine

Usage:
    from siteaudit.scanner import ScanOrchestrator

    orchestrator = ScanOrchestrator()
    report = orchestrator.execute("example.com")

Architecture:
    Orchestrator (all scanners concurrently, failures isolated)
    ├── Scanners (uniform run(target_url) -> ScannerResult)
    │   ├── HeaderScanner      — "security"  HEAD probe → HeaderAuditor
    │   ├── CredentialScanner  — "api_keys"  SourceCollector → CredentialDetector
    │   ├── SEOScanner         — "seo"       PageSpeed API, local fallback
    │   └── ExternalScanner    — "legal", "vibe" (opaque hosted functions)
    │
    ├── Engines (collect raw data)
    │   ├── SourceCollector    — page HTML, linked scripts, inline scripts
    │   └── probe_headers      — single HEAD request
    │
    ├── Analyzers (interpret data → produce findings)
    │   ├── CredentialDetector — signature catalog, entropy gate, redaction
    │   ├── HeaderAuditor      — weighted security header policy
    │   └── SEO analyzer       — PageSpeed payload / local markup checks
    │
    └── Aggregation (utils.scoring.calc_overall_score)
"""

from siteaudit.scanner.orchestrator import ScanOrchestrator, ScanRequestError, normalize_url

__all__ = ["ScanOrchestrator", "ScanRequestError", "normalize_url"]
