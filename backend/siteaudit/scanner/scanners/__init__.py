# siteaudit/scanner/scanners/__init__.py
"""
Invocable scanners.
Every scanner satisfies the same contract: run(target_url) -> ScannerResult.
"""
from typing import Any, Dict, Optional

from siteaudit.scanner.base import BaseScanner
from siteaudit.scanner.scanners.credential_scanner import CredentialScanner
from siteaudit.scanner.scanners.external_scanner import (
    EXTERNAL_FUNCTIONS,
    ExternalScanner,
    functions_base_url,
)
from siteaudit.scanner.scanners.header_scanner import HeaderScanner
from siteaudit.scanner.scanners.seo_scanner import SEOScanner

# Registry of internal scanners, keyed by request tag.
ALL_SCANNERS = {
    "security": HeaderScanner,
    "api_keys": CredentialScanner,
    "seo": SEOScanner,
}


def available_scanners(
    configs: Optional[Dict[str, Dict[str, Any]]] = None,
) -> Dict[str, BaseScanner]:
    """
    Instantiate every known scanner, in registry order.

    External scanners are only known when SCANNER_FUNCTIONS_URL is set.
    """
    configs = configs or {}
    scanners: Dict[str, BaseScanner] = {
        tag: cls(configs.get(tag)) for tag, cls in ALL_SCANNERS.items()
    }
    if functions_base_url():
        for tag in EXTERNAL_FUNCTIONS:
            scanners[tag] = ExternalScanner.for_tag(tag, configs.get(tag))
    return scanners


__all__ = [
    "CredentialScanner", "HeaderScanner", "SEOScanner", "ExternalScanner",
    "ALL_SCANNERS", "EXTERNAL_FUNCTIONS", "available_scanners",
]
