"""
Policy Models
=============

Company policies, policy templates and policies generated from templates.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from shared.models.common import ORMModel
from shared.models.company import StoredFile


DEFAULT_PLACEHOLDERS = [
    "[COMPANY_NAME]",
    "[COMPANY_LOGO]",
    "[CEO_NAME]",
    "[CIO_NAME]",
    "[EFFECTIVE_DATE]",
]


class TemplateType(str, Enum):
    WORD = "word"
    PDF = "pdf"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# =============================================================================
# Policies
# =============================================================================


class PolicyCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    type: str = Field(..., min_length=1, max_length=100)
    content: str | None = None


class PolicyUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    type: str | None = Field(default=None, min_length=1, max_length=100)
    content: str | None = None


class Policy(ORMModel):
    id: int
    title: str
    type: str
    content: str | None = None
    file_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# =============================================================================
# Templates
# =============================================================================


class PolicyCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class PolicyCategory(ORMModel):
    id: int
    name: str
    description: str | None = None


class PolicyTemplate(ORMModel):
    id: int
    name: str
    description: str | None = None
    template_type: TemplateType
    file_id: int
    category_id: int | None = None
    uploaded_by: int | None = None
    version: str = "1.0"
    placeholders: list[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None


class TemplateStatusUpdate(BaseModel):
    is_active: bool


# =============================================================================
# Generated policies
# =============================================================================


class GeneratePolicyRequest(BaseModel):
    """Fill a template's placeholders for a company."""

    template_id: int
    company_id: int | None = Field(default=None, description="Defaults to the caller's company")
    replacement_data: dict[str, str] = Field(
        default_factory=dict,
        description="Placeholder -> value overrides, e.g. {'[CEO_NAME]': 'A. Name'}",
    )
    notes: str | None = None


class ApprovalUpdate(BaseModel):
    approval_status: ApprovalStatus
    notes: str | None = None


class GeneratedPolicy(ORMModel):
    id: int
    template_id: int
    company_id: int
    generated_file_id: int
    version: str = "1.0"
    approval_status: ApprovalStatus
    approved_by: int | None = None
    approved_date: datetime | None = None
    replacement_data: dict[str, str] = Field(default_factory=dict)
    notes: str | None = None
    created_at: datetime | None = None


class TemplateDetail(BaseModel):
    template: PolicyTemplate
    file: StoredFile


class GeneratedPolicyDetail(BaseModel):
    policy: GeneratedPolicy
    file: StoredFile
    template: PolicyTemplate | None = None
