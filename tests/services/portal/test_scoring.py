"""
Scoring Tests
=============

Tests for completion, compliance and heatmap scores.

Version: 0.1.0
"""

import pytest

from services.portal.services.scoring import (
    StatusTally,
    completion_score,
    compliance_score,
    control_code,
    domain_code,
    domain_risk_level,
    heatmap_compliance_percentage,
    heatmap_risk_label,
    heatmap_risk_score,
    risk_level_for_score,
)
from shared.models.assessment import ResultStatus


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mixed_tally() -> StatusTally:
    """2 implemented, 1 partial, 1 not implemented, 1 N/A."""
    return StatusTally.from_statuses(
        [
            ResultStatus.IMPLEMENTED,
            "implemented",
            ResultStatus.PARTIALLY_IMPLEMENTED,
            ResultStatus.NOT_IMPLEMENTED,
            ResultStatus.NOT_APPLICABLE,
        ]
    )


class TestStatusTally:
    def test_counts(self, mixed_tally: StatusTally) -> None:
        assert mixed_tally.as_dict() == {
            "total_controls": 5,
            "implemented": 2,
            "partially_implemented": 1,
            "not_implemented": 1,
            "not_applicable": 1,
        }
        assert mixed_tally.applicable == 4
        assert mixed_tally.weighted_implemented == 2.5

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValueError):
            StatusTally.from_statuses(["done"])


class TestScores:
    def test_completion_counts_not_applicable(self, mixed_tally: StatusTally) -> None:
        assert completion_score(mixed_tally) == 50.0

    def test_compliance_excludes_not_applicable(self, mixed_tally: StatusTally) -> None:
        assert compliance_score(mixed_tally) == 62.5

    def test_empty_tally_scores_zero(self) -> None:
        assert completion_score(StatusTally()) == 0.0
        assert compliance_score(StatusTally()) == 0.0

    def test_all_not_applicable(self) -> None:
        tally = StatusTally(not_applicable=3)

        assert compliance_score(tally) == 0.0
        assert completion_score(tally) == 0.0

    def test_rounded_to_one_decimal(self) -> None:
        tally = StatusTally(implemented=1, not_implemented=2)

        assert compliance_score(tally) == 33.3

    def test_halves_round_up(self) -> None:
        tally = StatusTally(partially_implemented=1, not_implemented=7)

        assert completion_score(tally) == 6.3
        assert compliance_score(StatusTally(partially_implemented=1, not_implemented=3)) == 12.5

    @pytest.mark.parametrize(
        ("score", "level"),
        [(100, "Low"), (80, "Low"), (79.9, "Medium"), (50, "Medium"), (49.9, "High"), (0, "High")],
    )
    def test_risk_level_thresholds(self, score: float, level: str) -> None:
        assert risk_level_for_score(score) == level
        assert domain_risk_level(score) == level.lower()


class TestHeatmap:
    def test_risk_score_weights(self, mixed_tally: StatusTally) -> None:
        # (0 + 0 + 50 + 100 + 0) / 5 results
        assert heatmap_risk_score(mixed_tally) == 30

    def test_compliance_percentage(self, mixed_tally: StatusTally) -> None:
        assert heatmap_compliance_percentage(mixed_tally) == 63

    def test_not_applicable_dilutes_risk(self) -> None:
        assert heatmap_risk_score(StatusTally(not_implemented=1, not_applicable=1)) == 50

    def test_risk_score_rounds_half_up(self) -> None:
        assert heatmap_risk_score(StatusTally(implemented=3, partially_implemented=1)) == 13

    def test_only_not_applicable(self) -> None:
        tally = StatusTally(not_applicable=2)

        assert heatmap_risk_score(tally) == 0
        assert heatmap_compliance_percentage(tally) == 0

    @pytest.mark.parametrize(
        ("score", "label"),
        [(0, "Very Low"), (20, "Very Low"), (21, "Low"), (60, "Medium"), (80, "High"), (81, "Very High")],
    )
    def test_labels(self, score: int, label: str) -> None:
        assert heatmap_risk_label(score) == label

    def test_codes_are_one_based(self) -> None:
        assert domain_code(0) == "D1"
        assert control_code(2) == "C3"
