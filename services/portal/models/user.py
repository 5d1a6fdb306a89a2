"""
User and Company Database Models
================================

SQLAlchemy ORM models for accounts, companies, staff and stored files.

Version: 0.1.0
"""

from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.company import FileType
from shared.models.user import UserRole


class CompanyModel(Base):
    """Organization profile; a user belongs to at most one company."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_name = Column(String(255), nullable=False)
    sector = Column(String(100))
    size = Column(String(50))
    website = Column(String(255))
    address = Column(Text)
    city = Column(String(100))
    country = Column(String(100))
    postal_code = Column(String(20))
    contact_email = Column(String(255))
    contact_phone = Column(String(50))

    # Leadership, used to fill policy templates
    ceo_name = Column(String(255))
    cio_name = Column(String(255))
    cto_name = Column(String(255))
    ciso_name = Column(String(255))

    business_description = Column(Text)
    founded_year = Column(Integer)
    employee_count = Column(Integer)
    annual_revenue = Column(String(100))

    logo_file_id = Column(Integer, ForeignKey("stored_files.id", ondelete="SET NULL", use_alter=True))
    document_file_ids = Column(JSON, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Company {self.id}: {self.company_name}>"

    def to_dict(self) -> dict[str, Any]:
        """Profile fields used as context for AI analyses and templates."""
        return {
            "id": self.id,
            "company_name": self.company_name,
            "sector": self.sector,
            "size": self.size,
            "country": self.country,
            "employee_count": self.employee_count,
            "ceo_name": self.ceo_name,
            "cio_name": self.cio_name,
            "ciso_name": self.ciso_name,
        }


class UserModel(Base):
    """
    Local account.

    Clerk users are provisioned on first request and have no password hash.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String(255))
    email = Column(String(255))
    role = Column(db_enum(UserRole), nullable=False, default=UserRole.USER)
    access_level = Column(String(50), nullable=False, default="trial")
    is_active = Column(Boolean, nullable=False, default=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"))
    clerk_user_id = Column(String(255), unique=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.username} ({self.role.value})>"

    @property
    def roles(self) -> list[str]:
        return [self.role.value]


class CybersecurityStaffModel(Base):
    __tablename__ = "cybersecurity_staff"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    staff_name = Column(String(255), nullable=False)


class StoredFileModel(Base):
    """Metadata for a file kept in upload storage."""

    __tablename__ = "stored_files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, nullable=False)
    path = Column(String(1024), nullable=False)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    file_type = Column(db_enum(FileType), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<StoredFile {self.id}: {self.original_name} ({self.file_type.value})>"
