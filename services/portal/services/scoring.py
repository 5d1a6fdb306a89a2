"""
Compliance Scoring
==================

Arithmetic shared by the assessment, report and heatmap endpoints.

Scores:
- Completion score: (implemented + 0.5 * partial) / total, N/A counted
- Compliance score: same numerator over applicable controls only
- Heatmap risk score: partial weighs 50, not implemented 100, over every result

Halves round up, so 62.5 becomes 63 and 6.25 becomes 6.3.

Version: 0.1.0
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from shared.models.assessment import ResultStatus


# =============================================================================
# Tally
# =============================================================================


@dataclass
class StatusTally:
    """Number of results per implementation status."""

    implemented: int = 0
    partially_implemented: int = 0
    not_implemented: int = 0
    not_applicable: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[ResultStatus | str]) -> "StatusTally":
        tally = cls()
        for raw in statuses:
            status = ResultStatus(raw)
            setattr(tally, status.value, getattr(tally, status.value) + 1)
        return tally

    @property
    def total(self) -> int:
        return self.implemented + self.partially_implemented + self.not_implemented + self.not_applicable

    @property
    def applicable(self) -> int:
        return self.total - self.not_applicable

    @property
    def weighted_implemented(self) -> float:
        return self.implemented + 0.5 * self.partially_implemented

    def as_dict(self) -> dict[str, int]:
        return {
            "total_controls": self.total,
            "implemented": self.implemented,
            "partially_implemented": self.partially_implemented,
            "not_implemented": self.not_implemented,
            "not_applicable": self.not_applicable,
        }


# =============================================================================
# Scores
# =============================================================================


def round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def completion_score(tally: StatusTally) -> float:
    """Score stored on an assessment when it is completed, 0-100 to one decimal."""
    if tally.total == 0:
        return 0.0
    return round_half_up(tally.weighted_implemented / tally.total * 100, 1)


def compliance_score(tally: StatusTally) -> float:
    """Report score over applicable controls, 0-100 to one decimal."""
    if tally.applicable == 0:
        return 0.0
    return round_half_up(tally.weighted_implemented / tally.applicable * 100, 1)


def risk_level_for_score(score: float) -> str:
    """Overall risk level for a compliance score."""
    if score >= 80:
        return "Low"
    if score >= 50:
        return "Medium"
    return "High"


def domain_risk_level(score: float) -> str:
    return risk_level_for_score(score).lower()


# =============================================================================
# Heatmap
# =============================================================================

HEATMAP_LABELS = (
    (20, "Very Low"),
    (40, "Low"),
    (60, "Medium"),
    (80, "High"),
)


def heatmap_risk_score(tally: StatusTally) -> int:
    """Weighted risk 0-100 for a domain; N/A results dilute the score."""
    counted = tally.total
    if counted == 0:
        return 0
    weighted = tally.implemented * 0 + tally.partially_implemented * 50 + tally.not_implemented * 100
    return int(round_half_up(weighted / counted))


def heatmap_risk_label(risk_score: int) -> str:
    for upper, label in HEATMAP_LABELS:
        if risk_score <= upper:
            return label
    return "Very High"


def heatmap_compliance_percentage(tally: StatusTally) -> int:
    counted = tally.applicable
    if counted == 0:
        return 0
    return int(round_half_up(tally.weighted_implemented / counted * 100))


def domain_code(index: int) -> str:
    return f"D{index + 1}"


def control_code(index: int) -> str:
    return f"C{index + 1}"
