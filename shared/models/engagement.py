"""
Engagement Models
=================

Contact messages and demo requests from the public site.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ContactStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class DemoStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    message: str = Field(..., min_length=10)


class ContactMessage(ORMModel):
    id: int
    name: str
    email: str
    message: str
    status: ContactStatus
    created_at: datetime | None = None


class ContactStatusUpdate(BaseModel):
    status: ContactStatus


class DemoRequestCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    message: str | None = None


class DemoRequest(ORMModel):
    id: int
    name: str
    email: str
    company: str
    message: str | None = None
    status: DemoStatus
    created_at: datetime | None = None


class DemoStatusUpdate(BaseModel):
    status: DemoStatus
