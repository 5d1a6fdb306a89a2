"""
Assessment Database Models
==========================

SQLAlchemy ORM models for compliance assessments.

Version: 0.1.0
"""

from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.assessment import (
    AssessmentStatus,
    MaturityLevel,
    ResultStatus,
    TaskPriority,
    TaskStatus,
)


class AssessmentModel(Base):
    """
    One run of a framework assessment for a company.

    Results are seeded as not_implemented for every framework control when
    the assessment is created.
    """

    __tablename__ = "assessments"
    __table_args__ = (
        Index("ix_assessments_company", "company_id"),
        Index("ix_assessments_status", "status"),
        CheckConstraint("score >= 0 AND score <= 100", name="check_assessment_score"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    framework_id = Column(Integer, ForeignKey("frameworks.id"), nullable=False)
    name = Column(String(255), nullable=False)
    status = Column(db_enum(AssessmentStatus), nullable=False, default=AssessmentStatus.IN_PROGRESS)
    score = Column(Float)

    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completion_date = Column(DateTime(timezone=True))
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    findings = Column(Text)
    recommendations = Column(Text)

    def __repr__(self) -> str:
        return f"<Assessment {self.id}: {self.name} ({self.status.value})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "framework_id": self.framework_id,
            "status": self.status.value,
            "score": self.score,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "completion_date": self.completion_date.isoformat() if self.completion_date else None,
        }


class AssessmentResultModel(Base):
    """Implementation status of one control in one assessment."""

    __tablename__ = "assessment_results"
    __table_args__ = (
        UniqueConstraint("assessment_id", "control_id", name="uq_assessment_results_pair"),
        CheckConstraint("maturity_score >= 1 AND maturity_score <= 5", name="check_maturity_score"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    control_id = Column(Integer, ForeignKey("controls.id", ondelete="CASCADE"), nullable=False)
    status = Column(db_enum(ResultStatus), nullable=False, default=ResultStatus.NOT_IMPLEMENTED)

    evidence = Column(Text)
    comments = Column(Text)
    attachments = Column(JSON, default=list)

    # SAMA CSF maturity
    maturity_level = Column(db_enum(MaturityLevel))
    maturity_score = Column(Integer)

    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<AssessmentResult {self.id}: control {self.control_id} ({self.status.value})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "control_id": self.control_id,
            "status": self.status.value,
            "evidence": self.evidence,
            "comments": self.comments,
            "maturity_level": self.maturity_level.value if self.maturity_level else None,
            "maturity_score": self.maturity_score,
        }


class RemediationTaskModel(Base):
    __tablename__ = "remediation_tasks"
    __table_args__ = (Index("ix_remediation_tasks_assessment", "assessment_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    control_id = Column(Integer, ForeignKey("controls.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(db_enum(TaskStatus), nullable=False, default=TaskStatus.OPEN)
    priority = Column(db_enum(TaskPriority), nullable=False, default=TaskPriority.MEDIUM)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    due_date = Column(Date)
    external_id = Column(String(100))  # ticket id in an external tracker

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<RemediationTask {self.id}: {self.title} ({self.status.value})>"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
        }
