"""
Portal Database Models
======================

SQLAlchemy ORM models for the MetaWorks portal.

Version: 0.1.0
"""

from services.portal.models.assessment import (
    AssessmentModel,
    AssessmentResultModel,
    RemediationTaskModel,
)
from services.portal.models.engagement import ContactMessageModel, DemoRequestModel
from services.portal.models.framework import (
    ControlModel,
    DomainModel,
    FrameworkModel,
    SubdomainModel,
)
from services.portal.models.onboarding import (
    BadgeModel,
    OnboardingStepModel,
    UserBadgeModel,
    UserGameStatsModel,
    UserProgressModel,
)
from services.portal.models.policy import (
    GeneratedPolicyModel,
    PolicyCategoryModel,
    PolicyModel,
    PolicyTemplateModel,
)
from services.portal.models.report import ComplianceReportModel, ReportShareLinkModel
from services.portal.models.risk import AssessmentRiskModel, RiskModel
from services.portal.models.user import (
    CompanyModel,
    CybersecurityStaffModel,
    StoredFileModel,
    UserModel,
)


__all__ = [
    # Accounts
    "UserModel",
    "CompanyModel",
    "CybersecurityStaffModel",
    "StoredFileModel",
    # Frameworks
    "FrameworkModel",
    "DomainModel",
    "SubdomainModel",
    "ControlModel",
    # Assessments
    "AssessmentModel",
    "AssessmentResultModel",
    "RemediationTaskModel",
    # Reports
    "ComplianceReportModel",
    "ReportShareLinkModel",
    # Policies
    "PolicyModel",
    "PolicyCategoryModel",
    "PolicyTemplateModel",
    "GeneratedPolicyModel",
    # Onboarding
    "OnboardingStepModel",
    "UserProgressModel",
    "BadgeModel",
    "UserBadgeModel",
    "UserGameStatsModel",
    # Risks
    "RiskModel",
    "AssessmentRiskModel",
    # Engagement
    "ContactMessageModel",
    "DemoRequestModel",
]
