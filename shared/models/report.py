"""
Report Models
=============

Compliance reports and their shareable links.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class ReportFormat(str, Enum):
    PDF = "pdf"
    HTML = "html"
    JSON = "json"


class ReportStatus(str, Enum):
    DRAFT = "draft"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class ReportCreate(BaseModel):
    """Request model for generating a report from an assessment."""

    assessment_id: int
    title: str | None = Field(default=None, max_length=255)
    format: ReportFormat = ReportFormat.PDF
    is_public: bool = False


class Report(ORMModel):
    """Compliance report response model."""

    id: int
    assessment_id: int
    company_id: int
    created_by: int | None = None
    title: str
    summary: str | None = None
    report_data: dict[str, Any] = Field(default_factory=dict)
    format: ReportFormat
    status: ReportStatus
    is_public: bool = False
    created_at: datetime | None = None


class ShareLinkCreate(BaseModel):
    """Request model for sharing a report."""

    expires_at: datetime | None = None
    password: str | None = Field(default=None, min_length=1, max_length=128)
    max_views: int | None = Field(default=None, ge=1)


class ShareLink(ORMModel):
    """Share link metadata; the password digest is never returned."""

    id: int
    report_id: int
    share_token: str
    created_by: int | None = None
    expires_at: datetime | None = None
    view_count: int = 0
    max_views: int | None = None
    is_active: bool = True
    has_password: bool = False
    created_at: datetime | None = None
