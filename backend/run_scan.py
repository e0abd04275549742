#!/usr/bin/env python3
"""
run_scan.py

Runs one site audit from the command line and prints the report as JSON.

Usage:
    # Every known scanner:
    python run_scan.py example.com

    # Selected scanners, indented output:
    python run_scan.py https://example.com security api_keys --pretty

Exit status is 2 when the URL or a scanner name is rejected.
"""

import json
import logging
import os
import sys

# Ensure the package is importable when run from anywhere
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from siteaudit import scanner_config_from_env
from siteaudit.scanner import ScanOrchestrator, ScanRequestError


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    pretty = "--pretty" in args
    args = [a for a in args if a != "--pretty"]

    if not args:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    url, tags = args[0], args[1:] or None

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    orchestrator = ScanOrchestrator(configs=scanner_config_from_env())
    try:
        report = orchestrator.execute(url, tags)
    except ScanRequestError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(report.to_dict(), indent=2 if pretty else None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
