# tests/test_scoring.py
"""
Result summary tests
Tests: Letter score bands, check counts, failed-job result
"""

import pytest

from testgenium.engines.base import Finding
from testgenium.services.scoring import count_by_severity, empty_result, letter_score, summarize, total_checks


def findings_of(*severities):
    return [
        Finding(type=f"Issue {i}", severity=severity, description="Detected", url="https://example.com")
        for i, severity in enumerate(severities)
    ]


class TestLetterScore:

    @pytest.mark.parametrize("severities,expected", [
        ((), "A+"),
        (("low", "low"), "A+"),
        (("medium",), "A"),
        (("medium", "medium", "low"), "A"),
        (("high",), "B"),
        (("high", "medium", "medium"), "B"),
        (("high", "medium", "medium", "medium"), "C"),
        (("high", "high"), "C"),
        (("high", "high", "high"), "D"),
        (("critical",), "F"),
        (("critical", "low"), "F"),
    ])
    def test_bands(self, severities, expected):
        assert letter_score(count_by_severity(findings_of(*severities))) == expected


class TestSummary:

    def test_summarize(self):
        result = summarize(findings_of("high", "low", "low"), "complete", "standard")

        assert result == {
            "totalTests": 12,
            "vulnerabilities": 3,
            "coverage": 85,
            "score": "B",
            "summary": {"critical": 0, "high": 1, "medium": 0, "low": 2},
        }

    @pytest.mark.parametrize("profile,depth,expected", [
        ("complete", "basic", 6),
        ("security", "standard", 8),
        ("performance", "deep", 8),
        ("functional", "basic", 3),
    ])
    def test_total_checks(self, profile, depth, expected):
        assert total_checks(profile, depth) == expected

    def test_empty_result(self):
        result = empty_result()

        assert result["score"] == "N/A"
        assert result["vulnerabilities"] == 0
        assert sum(result["summary"].values()) == 0

    def test_unknown_severity_rejected(self):
        with pytest.raises(ValueError):
            Finding(type="Odd", severity="urgent", description="?", url="https://example.com")
