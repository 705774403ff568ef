# testgenium/services/scoring.py
"""
Result summary for a finished job.

The letter score is deterministic: the worst severity present decides the
band, the number of highs and then mediums decides within it.

    any critical                          -> F
    3+ highs                              -> D
    2 highs, or 1 high with 3+ mediums    -> C
    1 high                                -> B
    mediums only                          -> A
    lows only, or nothing                 -> A+
"""
import math
from typing import Any, Dict, Iterable, List

from testgenium.core.constants import (
    DEPTH_CHECK_FACTOR,
    DEPTH_COVERAGE,
    PROFILE_CHECKS,
    SeverityLevel,
)
from testgenium.engines.base import Finding

NO_SCORE = "N/A"


def count_by_severity(findings: Iterable[Finding]) -> Dict[str, int]:
    counts = {level.value: 0 for level in SeverityLevel}
    for finding in findings:
        counts[finding.severity.value] += 1
    return counts


def letter_score(counts: Dict[str, int]) -> str:
    critical = counts.get(SeverityLevel.CRITICAL.value, 0)
    high = counts.get(SeverityLevel.HIGH.value, 0)
    medium = counts.get(SeverityLevel.MEDIUM.value, 0)

    if critical:
        return "F"
    if high >= 3:
        return "D"
    if high == 2 or (high == 1 and medium >= 3):
        return "C"
    if high == 1:
        return "B"
    if medium:
        return "A"
    return "A+"


def total_checks(profile: str, depth: str) -> int:
    """Checks executed for a profile at a depth"""
    return math.ceil(PROFILE_CHECKS[profile] * DEPTH_CHECK_FACTOR[depth])


def summarize(findings: List[Finding], profile: str, depth: str) -> Dict[str, Any]:
    """Build the stored result for a completed job"""
    counts = count_by_severity(findings)
    return {
        "totalTests": total_checks(profile, depth),
        "vulnerabilities": len(findings),
        "coverage": DEPTH_COVERAGE[depth],
        "score": letter_score(counts),
        "summary": counts,
    }


def empty_result() -> Dict[str, Any]:
    """Result stored for a failed job"""
    return {
        "totalTests": 0,
        "vulnerabilities": 0,
        "coverage": 0,
        "score": NO_SCORE,
        "summary": {level.value: 0 for level in SeverityLevel},
    }
