"""
Risk Register Models
====================

Risk register entries, the likelihood/impact scales and assessment
assignments.

Version: 0.1.0
"""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class RiskCategory(str, Enum):
    STRATEGIC = "Strategic"
    OPERATIONAL = "Operational"
    COMPLIANCE = "Compliance"


class Likelihood(str, Enum):
    VERY_LIKELY = "Very Likely"
    LIKELY = "Likely"
    POSSIBLE = "Possible"
    UNLIKELY = "Unlikely"
    VERY_UNLIKELY = "Very Unlikely"


class Impact(str, Enum):
    CATASTROPHIC = "Catastrophic"
    MAJOR = "Major"
    SERIOUS = "Serious"
    MEDIUM = "Medium"
    MINOR = "Minor"


class RiskLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ControlEffectiveness(str, Enum):
    EFFECTIVE = "Effective"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    NONE = "None"


class AssessmentRiskStatus(str, Enum):
    TO_ASSESS = "to_assess"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# =============================================================================
# Risks
# =============================================================================


class RiskCreate(BaseModel):
    """Request model for a risk register entry."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    cause: str | None = None
    category: RiskCategory
    owner: str | None = Field(default=None, max_length=255)
    likelihood: Likelihood
    impact: Impact
    inherent_risk_level: RiskLevel | None = Field(
        default=None,
        description="Derived from likelihood and impact when omitted",
    )
    existing_controls: str | None = None
    control_effectiveness: ControlEffectiveness | None = None
    residual_risk_level: RiskLevel | None = None
    mitigation_actions: str | None = None
    target_date: date | None = None
    is_accepted: bool = False


class Risk(ORMModel):
    id: int
    title: str
    description: str
    cause: str | None = None
    category: RiskCategory
    owner: str | None = None
    likelihood: Likelihood
    impact: Impact
    inherent_risk_level: RiskLevel
    existing_controls: str | None = None
    control_effectiveness: ControlEffectiveness | None = None
    residual_risk_level: RiskLevel | None = None
    mitigation_actions: str | None = None
    target_date: date | None = None
    is_accepted: bool = False
    company_id: int | None = None
    created_at: datetime | None = None


class RiskImportRequest(BaseModel):
    """Bulk import payload; entries are validated one by one."""

    risks: list[dict[str, Any]] = Field(..., min_length=1)


class RiskImportResult(BaseModel):
    index: int
    success: bool
    risk_id: int | None = None
    title: str | None = None
    error: str | None = None


class RiskImportSummary(BaseModel):
    total_processed: int
    success_count: int
    failure_count: int
    results: list[RiskImportResult]


# =============================================================================
# Assessment assignments
# =============================================================================


class AssessmentRiskCreate(BaseModel):
    assessment_id: int
    risk_id: int
    status: AssessmentRiskStatus = AssessmentRiskStatus.TO_ASSESS
    notes: str | None = None


class AssessmentRiskAssign(BaseModel):
    """Assign several register risks to one assessment."""

    assessment_id: int
    risk_ids: list[int] = Field(..., min_length=1)


class AssessmentRiskStatusUpdate(BaseModel):
    status: AssessmentRiskStatus
    notes: str | None = None
    evidence: str | None = None


class AssessmentRisk(ORMModel):
    id: int
    assessment_id: int
    risk_id: int
    status: AssessmentRiskStatus
    notes: str | None = None
    evidence: str | None = None
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None


class AssignmentResult(BaseModel):
    risk_id: int
    success: bool
    assessment_risk_id: int | None = None
    error: str | None = None
