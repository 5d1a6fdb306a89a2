"""
Risk Matrix Tests
=================

Tests for likelihood x impact levels and bulk import validation.

Version: 0.1.0
"""

import pytest

from services.portal.services.risk_matrix import (
    inherent_level,
    level_for_score,
    plan_import,
    residual_level,
    resolve_levels,
    risk_score,
)
from shared.models.risk import (
    ControlEffectiveness,
    Impact,
    Likelihood,
    RiskCreate,
    RiskImportResult,
    RiskLevel,
)


def valid_entry(**overrides) -> dict:
    entry = {
        "title": "Phishing",
        "description": "Credential theft through phishing",
        "category": "Operational",
        "likelihood": "Likely",
        "impact": "Major",
        "inherent_risk_level": "High",
    }
    entry.update(overrides)
    return entry


class TestMatrix:
    def test_score_is_product(self) -> None:
        assert risk_score(Likelihood.VERY_LIKELY, Impact.CATASTROPHIC) == 25
        assert risk_score("Unlikely", "Medium") == 4

    @pytest.mark.parametrize(("score", "level"), [(12, RiskLevel.HIGH), (11, RiskLevel.MEDIUM), (6, RiskLevel.MEDIUM), (5, RiskLevel.LOW)])
    def test_level_thresholds(self, score: int, level: RiskLevel) -> None:
        assert level_for_score(score) == level

    def test_inherent_level(self) -> None:
        assert inherent_level(Likelihood.POSSIBLE, Impact.SERIOUS) == RiskLevel.MEDIUM

    def test_effective_controls_lower_one_step(self) -> None:
        assert residual_level(RiskLevel.HIGH, ControlEffectiveness.EFFECTIVE) == RiskLevel.MEDIUM
        assert residual_level(RiskLevel.LOW, ControlEffectiveness.EFFECTIVE) == RiskLevel.LOW

    def test_weak_controls_keep_level(self) -> None:
        assert residual_level(RiskLevel.HIGH, ControlEffectiveness.NEEDS_IMPROVEMENT) == RiskLevel.HIGH
        assert residual_level(RiskLevel.MEDIUM, None) == RiskLevel.MEDIUM


class TestResolveLevels:
    def test_derives_missing_levels(self) -> None:
        risk = RiskCreate.model_validate(
            valid_entry(inherent_risk_level=None, control_effectiveness="Effective")
        )

        assert resolve_levels(risk) == (RiskLevel.HIGH, RiskLevel.MEDIUM)

    def test_residual_left_empty_without_effectiveness(self) -> None:
        risk = RiskCreate.model_validate(valid_entry(inherent_risk_level="Low"))

        assert resolve_levels(risk) == (RiskLevel.LOW, None)


class TestPlanImport:
    def test_mixed_entries(self) -> None:
        plan = plan_import(
            [
                valid_entry(),
                {"title": "No impact", "description": "x"},
                valid_entry(title="Bad likelihood", likelihood="Sometimes"),
            ]
        )

        assert [index for index, _ in plan.valid] == [0]
        failures = {r.index: r for r in plan.results}
        assert failures[1].error == "Missing required fields"
        assert failures[1].title == "No impact"
        assert failures[2].error.startswith("likelihood:")

    def test_summary_sorted_by_index(self) -> None:
        plan = plan_import([{"title": "a"}])
        plan.results.append(RiskImportResult(index=3, success=True, risk_id=9, title="b"))
        plan.results.insert(0, RiskImportResult(index=5, success=True, risk_id=10, title="c"))

        summary = plan.summary()

        assert [r.index for r in summary.results] == [0, 3, 5]
        assert summary.total_processed == 3
        assert summary.success_count == 2
        assert summary.failure_count == 1
