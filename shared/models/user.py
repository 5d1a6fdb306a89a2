"""
User Models
===========

Account registration, admin user management and token responses.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserRegister(BaseModel):
    """Self-service registration."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)
    email: str | None = Field(default=None, max_length=255)
    company_id: int | None = None


class UserCreate(UserRegister):
    """Admin-created account."""

    role: UserRole = UserRole.USER
    access_level: str = Field(default="trial", max_length=50)


class UserAccount(ORMModel):
    id: int
    username: str
    email: str | None = None
    role: UserRole
    access_level: str = "trial"
    is_active: bool = True
    company_id: int | None = None
    created_at: datetime | None = None


class RefreshRequest(BaseModel):
    refresh_token: str


class DashboardAccess(BaseModel):
    has_admin_access: bool
    has_user_access: bool


class ClerkKey(BaseModel):
    publishable_key: str
