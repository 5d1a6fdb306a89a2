"""
Assessment Models
=================

Models for compliance assessments, per-control results and remediation
tasks.

Version: 0.1.0
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class AssessmentStatus(str, Enum):
    """Assessment workflow status."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class ResultStatus(str, Enum):
    """Implementation status of one control within an assessment."""

    IMPLEMENTED = "implemented"
    PARTIALLY_IMPLEMENTED = "partially_implemented"
    NOT_IMPLEMENTED = "not_implemented"
    NOT_APPLICABLE = "not_applicable"


class MaturityLevel(str, Enum):
    """SAMA CSF maturity levels, lowest first."""

    BASELINE = "baseline"
    EVOLVING = "evolving"
    ESTABLISHED = "established"
    PREDICTABLE = "predictable"
    LEADING = "leading"


class TaskStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# =============================================================================
# Assessments
# =============================================================================


class AssessmentCreate(BaseModel):
    """Request model for creating an assessment."""

    framework_id: int
    name: str = Field(..., min_length=1, max_length=255)
    company_id: int | None = Field(default=None, description="Defaults to the caller's company")


class AssessmentUpdate(BaseModel):
    """Request model for updating an assessment."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    status: AssessmentStatus | None = None
    findings: str | None = None
    recommendations: str | None = None


class Assessment(ORMModel):
    """Full assessment model."""

    id: int
    company_id: int
    framework_id: int
    name: str
    status: AssessmentStatus
    score: float | None = None
    start_date: datetime | None = None
    completion_date: datetime | None = None
    created_by: int | None = None
    findings: str | None = None
    recommendations: str | None = None


# =============================================================================
# Results
# =============================================================================


class AssessmentResultUpsert(BaseModel):
    """Create or replace the result for an (assessment, control) pair."""

    assessment_id: int
    control_id: int
    status: ResultStatus
    evidence: str | None = None
    comments: str | None = None
    attachments: list[int] = Field(default_factory=list, description="Stored file ids")
    maturity_level: MaturityLevel | None = None
    maturity_score: int | None = Field(default=None, ge=1, le=5)


class AssessmentResultUpdate(BaseModel):
    status: ResultStatus | None = None
    evidence: str | None = None
    comments: str | None = None
    attachments: list[int] | None = None
    maturity_level: MaturityLevel | None = None
    maturity_score: int | None = Field(default=None, ge=1, le=5)


class AssessmentResult(ORMModel):
    id: int
    assessment_id: int
    control_id: int
    status: ResultStatus
    evidence: str | None = None
    comments: str | None = None
    attachments: list[int] = Field(default_factory=list)
    maturity_level: MaturityLevel | None = None
    maturity_score: int | None = None
    updated_by: int | None = None
    updated_at: datetime | None = None


# =============================================================================
# Heatmap
# =============================================================================


class HeatmapControl(BaseModel):
    code: str = Field(..., description="Positional code, C1, C2, ...")
    control_id: str
    name: str
    status: ResultStatus


class HeatmapDomain(BaseModel):
    """Risk heatmap cell for one domain."""

    code: str = Field(..., description="Positional code, D1, D2, ...")
    domain_id: int
    name: str
    risk_score: int
    risk_label: str
    compliance_percentage: int
    implemented: int = 0
    partially_implemented: int = 0
    not_implemented: int = 0
    controls: list[HeatmapControl] = Field(default_factory=list)


# =============================================================================
# Remediation
# =============================================================================


class RemediationTaskCreate(BaseModel):
    """Request model for creating a remediation task."""

    assessment_id: int
    control_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: int | None = None
    due_date: date | None = None
    external_id: str | None = Field(default=None, max_length=100)


class RemediationTaskStatusUpdate(BaseModel):
    status: TaskStatus


class RemediationTask(ORMModel):
    id: int
    assessment_id: int
    control_id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    assigned_to: int | None = None
    due_date: date | None = None
    external_id: str | None = None
    created_at: datetime | None = None
