"""
Tests for score arithmetic and aggregation.
"""
import pytest

from siteaudit.scanner.base import Finding, ScannerResult, failed_result
from siteaudit.utils.scoring import (
    calc_overall_score,
    calc_scanner_score,
    round_half_up,
    score_grade,
)


def result(score, degraded=False, scanner_type="test"):
    return ScannerResult(scanner_type=scanner_type, score=score, degraded=degraded)


def finding(severity, n=0):
    return Finding(id=f"f-{n}", severity=severity, title="t", description="d")


class TestRounding:

    def test_half_rounds_up(self):
        assert round_half_up(56.5) == 57
        assert round_half_up(2.5) == 3
        assert round_half_up(56.49) == 56
        assert round_half_up(56.6667) == 57


class TestScannerScore:

    def test_penalties_per_severity(self):
        assert calc_scanner_score([finding("critical")]) == 70
        assert calc_scanner_score([finding("high")]) == 80
        assert calc_scanner_score([finding("medium")]) == 90
        assert calc_scanner_score([finding("low")]) == 95
        assert calc_scanner_score([finding("info")]) == 100

    def test_clamped_at_zero(self):
        assert calc_scanner_score([finding("critical", i) for i in range(5)]) == 0


class TestOverallScore:

    def test_mean(self):
        assert calc_overall_score([result(80), result(60), result(40)]) == 60

    def test_mean_rounds_half_up(self):
        assert calc_overall_score([result(0), result(90), result(80)]) == 57

    def test_accepts_mapping(self):
        assert calc_overall_score({"a": result(100), "b": result(50)}) == 75

    def test_failed_scanner_counts_as_zero(self):
        failed = failed_result("security-headers", "connection refused")
        assert calc_overall_score([result(100), failed]) == 50

    def test_degraded_excluded_when_full_result_exists(self):
        assert calc_overall_score([result(90), result(40, degraded=True)]) == 90

    def test_all_degraded_still_averaged(self):
        assert calc_overall_score([result(40, degraded=True), result(61, degraded=True)]) == 51

    def test_no_results(self):
        assert calc_overall_score([]) == 0
        assert calc_overall_score({}) == 0


class TestResultModel:

    def test_score_clamped_on_construction(self):
        assert result(150).score == 100
        assert result(-20).score == 0

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValueError, match="urgent"):
            finding("urgent")

    def test_failed_result_shape(self):
        r = failed_result("api-key-leak", "boom", url="https://example.com")
        data = r.to_dict()

        assert data["scannerType"] == "api-key-leak"
        assert data["score"] == 0
        assert data["error"] == "boom"
        assert data["findings"] == [{
            "id": "scan-failed",
            "severity": "critical",
            "title": "Scan failed",
            "description": "Could not scan the target: boom",
            "recommendation": "Verify the URL is accessible and try again.",
        }]


class TestGrade:

    def test_boundaries(self):
        assert score_grade(100)[0] == "A"
        assert score_grade(90)[0] == "A"
        assert score_grade(89)[0] == "B"
        assert score_grade(70)[0] == "C"
        assert score_grade(60)[0] == "D"
        assert score_grade(59)[0] == "F"
