"""
Risk Matrix
===========

Likelihood x impact lookup for the risk register.

Version: 0.1.0
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from shared.models.risk import (
    ControlEffectiveness,
    Impact,
    Likelihood,
    RiskCreate,
    RiskImportResult,
    RiskImportSummary,
    RiskLevel,
)


LIKELIHOOD_VALUES: dict[Likelihood, int] = {
    Likelihood.VERY_LIKELY: 5,
    Likelihood.LIKELY: 4,
    Likelihood.POSSIBLE: 3,
    Likelihood.UNLIKELY: 2,
    Likelihood.VERY_UNLIKELY: 1,
}

IMPACT_VALUES: dict[Impact, int] = {
    Impact.CATASTROPHIC: 5,
    Impact.MAJOR: 4,
    Impact.SERIOUS: 3,
    Impact.MEDIUM: 2,
    Impact.MINOR: 1,
}

# Lowest first
_LEVEL_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH]

IMPORT_REQUIRED_FIELDS = (
    "title",
    "description",
    "category",
    "likelihood",
    "impact",
    "inherent_risk_level",
)


def risk_score(likelihood: Likelihood | str, impact: Impact | str) -> int:
    return LIKELIHOOD_VALUES[Likelihood(likelihood)] * IMPACT_VALUES[Impact(impact)]


def level_for_score(score: int) -> RiskLevel:
    if score >= 12:
        return RiskLevel.HIGH
    if score >= 6:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def inherent_level(likelihood: Likelihood | str, impact: Impact | str) -> RiskLevel:
    return level_for_score(risk_score(likelihood, impact))


def residual_level(
    inherent: RiskLevel,
    effectiveness: ControlEffectiveness | None,
) -> RiskLevel:
    """Effective controls lower the inherent level by one step."""
    if effectiveness != ControlEffectiveness.EFFECTIVE:
        return inherent
    index = _LEVEL_ORDER.index(inherent)
    return _LEVEL_ORDER[max(0, index - 1)]


def resolve_levels(risk: RiskCreate) -> tuple[RiskLevel, RiskLevel | None]:
    """
    Fill in inherent and residual levels the caller left out.

    Residual is only derived when control effectiveness is known.
    """
    inherent = risk.inherent_risk_level or inherent_level(risk.likelihood, risk.impact)
    residual = risk.residual_risk_level
    if residual is None and risk.control_effectiveness is not None:
        residual = residual_level(inherent, risk.control_effectiveness)
    return inherent, residual


# =============================================================================
# Bulk import
# =============================================================================


@dataclass
class ImportPlan:
    """Validated entries ready to insert, with per-entry results."""

    valid: list[tuple[int, RiskCreate]] = field(default_factory=list)
    results: list[RiskImportResult] = field(default_factory=list)

    def summary(self) -> RiskImportSummary:
        results = sorted(self.results, key=lambda r: r.index)
        success_count = sum(1 for r in results if r.success)
        return RiskImportSummary(
            total_processed=len(results),
            success_count=success_count,
            failure_count=len(results) - success_count,
            results=results,
        )


def plan_import(entries: list[dict[str, Any]]) -> ImportPlan:
    """Validate import entries; failures are recorded, not raised."""
    plan = ImportPlan()
    for index, entry in enumerate(entries):
        title = entry.get("title")
        if any(not entry.get(name) for name in IMPORT_REQUIRED_FIELDS):
            plan.results.append(
                RiskImportResult(index=index, success=False, title=title, error="Missing required fields")
            )
            continue
        try:
            plan.valid.append((index, RiskCreate.model_validate(entry)))
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            plan.results.append(
                RiskImportResult(index=index, success=False, title=title, error=f"{location}: {first['msg']}")
            )
    return plan
