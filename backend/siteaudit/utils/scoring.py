# File: siteaudit/utils/scoring.py
# =============================================================================
# Centralized Score Calculator
# =============================================================================
# Single source of truth for score arithmetic across the scan engine.
# Used by: credential scanner, SEO scanner, orchestrator, report serialization.
#
# Scale (every score in the system):
#   100 = no issues found
#   0   = worst posture, or the scanner could not complete
# =============================================================================

from __future__ import annotations

import math
from collections import abc
from typing import TYPE_CHECKING, Iterable, Mapping, Union

if TYPE_CHECKING:
    from siteaudit.scanner.base import Finding, ScannerResult

# Points deducted per finding of each severity. Info costs nothing.
SEVERITY_PENALTIES = {
    "critical": 30,
    "high": 20,
    "medium": 10,
    "low": 5,
    "info": 0,
}


def round_half_up(value: float) -> int:
    """Ordinary rounding: 56.5 → 57, 56.49 → 56. Python's round() is banker's."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    return max(0, min(100, int(value)))


def calc_scanner_score(findings: Iterable[Finding]) -> int:
    """
    Severity-penalty score for a scanner that scores purely from its findings.

    Start at 100, subtract 30 per critical, 20 per high, 10 per medium,
    5 per low, clamp to [0, 100].
    """
    score = 100
    for f in findings:
        score -= SEVERITY_PENALTIES.get(f.severity, 0)
    return clamp_score(score)


def calc_overall_score(
    results: Union[Mapping[str, ScannerResult], Iterable[ScannerResult]],
) -> int:
    """
    Combine per-scanner scores into one overall score.

    Rule:
        round-half-up of the arithmetic mean of every scanner's score.
        Errored scanners count with their score of 0: a failure pulls the
        overall score down, it is never excluded.
        Degraded results (fallback paths that could not measure everything)
        are left out of the mean while at least one full result exists.
        No results → 0.
    """
    if isinstance(results, abc.Mapping):
        results = results.values()
    results = [r for r in results if r.score is not None]

    counted = [r for r in results if not r.degraded]
    if not counted:
        counted = results
    if not counted:
        return 0

    return round_half_up(sum(r.score for r in counted) / len(counted))


def score_grade(score: float) -> tuple[str, str]:
    """
    Convert a 0–100 score (higher is better) to a letter grade and description.
    Returns: (grade, description)
    """
    if score >= 90:
        return "A", "Excellent — no significant issues"
    elif score >= 80:
        return "B", "Good — minor hardening gaps"
    elif score >= 70:
        return "C", "Moderate — some concerning findings"
    elif score >= 60:
        return "D", "Poor — high-severity findings present"
    else:
        return "F", "Critical — immediate remediation required"
