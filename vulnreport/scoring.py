"""Severity ranking, score aggregation and security status grading.

CVSS v3.0 ratings (https://nvd.nist.gov/vuln-metrics/cvss/):

    Severity   Base Score Range
    None       0.0
    Low        0.1 - 3.9
    Medium     4.0 - 6.9
    High       7.0 - 8.9
    Critical   9.0 - 10.0
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vulnreport.models import Vulnerability

SEVERITY_THRESHOLD_NONE = 0.0
SEVERITY_THRESHOLD_LOW = 3.9
SEVERITY_THRESHOLD_MEDIUM = 6.9
SEVERITY_THRESHOLD_HIGH = 8.9
SEVERITY_THRESHOLD_CRITICAL = 10.0


class SeverityRank(Enum):
    NONE = "NONE"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return {
            SeverityRank.NONE: 0,
            SeverityRank.LOW: 1,
            SeverityRank.MEDIUM: 2,
            SeverityRank.HIGH: 3,
            SeverityRank.CRITICAL: 4,
        }[self]

    @property
    def threshold(self) -> float:
        """Highest score that still falls into this rank."""
        return score_for_severity(self)

    def __ge__(self, other: "SeverityRank") -> bool:
        return self.rank >= other.rank

    def __gt__(self, other: "SeverityRank") -> bool:
        return self.rank > other.rank

    def __le__(self, other: "SeverityRank") -> bool:
        return self.rank <= other.rank

    def __lt__(self, other: "SeverityRank") -> bool:
        return self.rank < other.rank


_THRESHOLDS: dict[SeverityRank, float] = {
    SeverityRank.NONE: SEVERITY_THRESHOLD_NONE,
    SeverityRank.LOW: SEVERITY_THRESHOLD_LOW,
    SeverityRank.MEDIUM: SEVERITY_THRESHOLD_MEDIUM,
    SeverityRank.HIGH: SEVERITY_THRESHOLD_HIGH,
    SeverityRank.CRITICAL: SEVERITY_THRESHOLD_CRITICAL,
}


def aggregate_score(vulnerabilities: Sequence[Vulnerability]) -> float:
    """Return an aggregated score for a group of vulnerabilities.

    NOTE: placeholder policy, the group takes the highest child score.
    """
    if not vulnerabilities:
        return 0.0
    ordered = sorted(vulnerabilities, key=lambda v: v.score, reverse=True)
    return ordered[0].score


def rank_severity(score: float) -> SeverityRank:
    """Bucket a score into its severity rank. Upper bounds are inclusive."""
    if score <= SEVERITY_THRESHOLD_NONE:
        return SeverityRank.NONE
    if score <= SEVERITY_THRESHOLD_LOW:
        return SeverityRank.LOW
    if score <= SEVERITY_THRESHOLD_MEDIUM:
        return SeverityRank.MEDIUM
    if score <= SEVERITY_THRESHOLD_HIGH:
        return SeverityRank.HIGH
    return SeverityRank.CRITICAL


def score_for_severity(severity: SeverityRank) -> float:
    """Return the maximum score for a severity rank.

    Anything that is not a known rank maps to the critical threshold.
    """
    try:
        return _THRESHOLDS.get(severity, SEVERITY_THRESHOLD_CRITICAL)
    except TypeError:
        # unhashable input
        return SEVERITY_THRESHOLD_CRITICAL


def security_status(score: float) -> str:
    """Grade an aggregated score from A (good) to F (bad)."""
    if score < 2.0:
        return "A"
    if score <= 3.5:
        return "B"
    if score <= 5.0:
        return "C"
    if score <= 6.5:
        return "D"
    if score <= 8.0:
        return "E"
    return "F"
