# siteaudit/scanner/engines/__init__.py
"""
Data collection engines.
Each engine collects raw data from the target.
Engines do NOT classify severity; they only gather facts.
"""
from siteaudit.scanner.engines.source_engine import Source, SourceCollector
from siteaudit.scanner.engines.header_engine import HeaderProbe, probe_headers

__all__ = ["Source", "SourceCollector", "HeaderProbe", "probe_headers"]
