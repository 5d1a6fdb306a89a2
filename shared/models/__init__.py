"""
Shared Models
=============

Pydantic request/response models for the MetaWorks API.

Models:
- Framework catalogue (Framework, Domain, Subdomain, Control)
- Assessments (Assessment, AssessmentResult, RemediationTask)
- Reports (Report, ShareLink)
- Risk register (Risk, AssessmentRisk)
- Policies, company profile, onboarding, engagement, users, assistant
"""

from shared.models.assessment import (
    Assessment,
    AssessmentCreate,
    AssessmentResult,
    AssessmentStatus,
    MaturityLevel,
    RemediationTask,
    ResultStatus,
    TaskPriority,
    TaskStatus,
)
from shared.models.common import (
    HealthResponse,
    MessageResponse,
    ORMModel,
    PaginatedResponse,
)
from shared.models.framework import Control, Domain, Framework, Subdomain
from shared.models.report import Report, ReportFormat, ShareLink
from shared.models.risk import (
    AssessmentRiskStatus,
    ControlEffectiveness,
    Impact,
    Likelihood,
    Risk,
    RiskCategory,
    RiskLevel,
)


__all__ = [
    # Common
    "ORMModel",
    "MessageResponse",
    "PaginatedResponse",
    "HealthResponse",
    # Frameworks
    "Framework",
    "Domain",
    "Subdomain",
    "Control",
    # Assessments
    "Assessment",
    "AssessmentCreate",
    "AssessmentResult",
    "AssessmentStatus",
    "ResultStatus",
    "MaturityLevel",
    "RemediationTask",
    "TaskStatus",
    "TaskPriority",
    # Reports
    "Report",
    "ReportFormat",
    "ShareLink",
    # Risks
    "Risk",
    "RiskCategory",
    "RiskLevel",
    "Likelihood",
    "Impact",
    "ControlEffectiveness",
    "AssessmentRiskStatus",
]
