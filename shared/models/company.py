"""
Company Models
==============

Company profile, cybersecurity staff and stored file metadata.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class FileType(str, Enum):
    """What an uploaded file is used for."""

    LOGO = "logo"
    DOCUMENT = "document"
    POLICY = "policy"
    TEMPLATE = "template"
    GENERATED_POLICY = "generated-policy"


class CompanyUpsert(BaseModel):
    """Create or update the caller's company profile."""

    company_name: str = Field(..., min_length=1, max_length=255)
    sector: str | None = None
    size: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    postal_code: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    ceo_name: str | None = None
    cio_name: str | None = None
    cto_name: str | None = None
    ciso_name: str | None = None
    business_description: str | None = None
    founded_year: int | None = Field(default=None, ge=1800, le=2100)
    employee_count: int | None = Field(default=None, ge=0)
    annual_revenue: str | None = None


class Company(ORMModel):
    id: int
    company_name: str
    sector: str | None = None
    size: str | None = None
    website: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    postal_code: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    ceo_name: str | None = None
    cio_name: str | None = None
    cto_name: str | None = None
    ciso_name: str | None = None
    business_description: str | None = None
    founded_year: int | None = None
    employee_count: int | None = None
    annual_revenue: str | None = None
    logo_file_id: int | None = None
    document_file_ids: list[int] = Field(default_factory=list)
    updated_at: datetime | None = None


class StaffUpdate(BaseModel):
    """Replace the company's cybersecurity staff list."""

    staff_names: list[str] = Field(default_factory=list)


class Staff(ORMModel):
    id: int
    company_id: int
    staff_name: str


class StoredFile(ORMModel):
    """Metadata of a file held in upload storage."""

    id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    file_type: FileType
    uploaded_by: int | None = None
    created_at: datetime | None = None
