"""
Framework Models
================

Compliance framework catalogue: frameworks, domains, subdomains and controls.

Version: 0.1.0
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class FrameworkCreate(BaseModel):
    """Request model for creating a framework."""

    name: str = Field(..., min_length=1, max_length=100, description="Unique short name, e.g. NCA-ECC")
    display_name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    version: str | None = Field(default=None, max_length=50)


class Framework(ORMModel):
    """Framework response model."""

    id: int
    name: str
    display_name: str
    description: str | None = None
    version: str | None = None
    created_at: datetime | None = None


class DomainCreate(BaseModel):
    """Request model for creating a domain."""

    framework_id: int
    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    order: int = Field(default=0, ge=0)


class Domain(ORMModel):
    id: int
    framework_id: int
    name: str
    display_name: str
    description: str | None = None
    order: int = 0


class SubdomainCreate(BaseModel):
    """Request model for creating a subdomain."""

    domain_id: int
    name: str = Field(..., min_length=1, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    order: int = Field(default=0, ge=0)


class SubdomainUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    display_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    order: int | None = Field(default=None, ge=0)


class Subdomain(ORMModel):
    id: int
    domain_id: int
    name: str
    display_name: str
    description: str | None = None
    order: int = 0


class ControlCreate(BaseModel):
    """Request model for creating a control."""

    subdomain_id: int
    control_id: str = Field(..., min_length=1, max_length=50, description="Control code, e.g. ECC-1.2.3")
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    guidance: str | None = None
    maturity_level: int = Field(default=1, ge=1, le=5)
    reference_links: list[str] = Field(default_factory=list)
    implementation_guide: str | None = None
    framework_specific: dict[str, Any] | None = None


class Control(ORMModel):
    """Control response model."""

    id: int
    subdomain_id: int
    control_id: str
    name: str
    description: str
    guidance: str | None = None
    maturity_level: int = 1
    reference_links: list[str] = Field(default_factory=list)
    implementation_guide: str | None = None
    framework_specific: dict[str, Any] | None = None
