"""
Report Database Models
======================

SQLAlchemy ORM models for compliance reports and share links.

Version: 0.1.0
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.report import ReportFormat, ReportStatus


class ComplianceReportModel(Base):
    """Snapshot of an assessment's results, stored as JSON."""

    __tablename__ = "compliance_reports"
    __table_args__ = (
        Index("ix_compliance_reports_assessment", "assessment_id"),
        Index("ix_compliance_reports_company", "company_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    title = Column(String(255), nullable=False)
    summary = Column(Text)
    report_data = Column(JSON, nullable=False, default=dict)
    format = Column(db_enum(ReportFormat), nullable=False, default=ReportFormat.PDF)
    status = Column(db_enum(ReportStatus), nullable=False, default=ReportStatus.COMPLETED)
    is_public = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<ComplianceReport {self.id}: {self.title}>"


class ReportShareLinkModel(Base):
    __tablename__ = "report_share_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    report_id = Column(Integer, ForeignKey("compliance_reports.id", ondelete="CASCADE"), nullable=False)
    share_token = Column(String(64), nullable=False, unique=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    expires_at = Column(DateTime(timezone=True))
    password = Column(String(64))  # SHA-256 hex digest
    view_count = Column(Integer, nullable=False, default=0)
    max_views = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<ReportShareLink {self.id}: report {self.report_id}>"

    @property
    def has_password(self) -> bool:
        return bool(self.password)
