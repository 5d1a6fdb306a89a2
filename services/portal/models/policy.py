"""
Policy Database Models
======================

SQLAlchemy ORM models for policies, templates and generated policies.

Version: 0.1.0
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.policy import ApprovalStatus, TemplateType


class PolicyModel(Base):
    __tablename__ = "policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    type = Column(String(100), nullable=False)
    content = Column(Text)
    file_id = Column(Integer, ForeignKey("stored_files.id", ondelete="SET NULL"))

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<Policy {self.id}: {self.title}>"


class PolicyCategoryModel(Base):
    __tablename__ = "policy_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)


class PolicyTemplateModel(Base):
    """Uploaded document with [PLACEHOLDER] markers."""

    __tablename__ = "policy_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    template_type = Column(db_enum(TemplateType), nullable=False)
    file_id = Column(Integer, ForeignKey("stored_files.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("policy_categories.id", ondelete="SET NULL"))
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    version = Column(String(20), nullable=False, default="1.0")
    placeholders = Column(JSON, default=list)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<PolicyTemplate {self.id}: {self.name} v{self.version}>"


class GeneratedPolicyModel(Base):
    __tablename__ = "generated_policies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    template_id = Column(Integer, ForeignKey("policy_templates.id", ondelete="CASCADE"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    generated_file_id = Column(Integer, ForeignKey("stored_files.id"), nullable=False)
    version = Column(String(20), nullable=False, default="1.0")
    approval_status = Column(db_enum(ApprovalStatus), nullable=False, default=ApprovalStatus.PENDING)
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    approved_date = Column(DateTime(timezone=True))
    replacement_data = Column(JSON, default=dict)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<GeneratedPolicy {self.id}: template {self.template_id} ({self.approval_status.value})>"
