"""
Risk Register Database Models
=============================

SQLAlchemy ORM models for the risk register and assessment assignments.

Version: 0.1.0
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.risk import (
    AssessmentRiskStatus,
    ControlEffectiveness,
    Impact,
    Likelihood,
    RiskCategory,
    RiskLevel,
)


class RiskModel(Base):
    __tablename__ = "risks"
    __table_args__ = (Index("ix_risks_company", "company_id"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    cause = Column(Text)
    category = Column(db_enum(RiskCategory), nullable=False)
    owner = Column(String(255))

    likelihood = Column(db_enum(Likelihood), nullable=False)
    impact = Column(db_enum(Impact), nullable=False)
    inherent_risk_level = Column(db_enum(RiskLevel), nullable=False)

    existing_controls = Column(Text)
    control_effectiveness = Column(db_enum(ControlEffectiveness))
    residual_risk_level = Column(db_enum(RiskLevel))
    mitigation_actions = Column(Text)
    target_date = Column(Date)
    is_accepted = Column(Boolean, nullable=False, default=False)

    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Risk {self.id}: {self.title} ({self.inherent_risk_level.value})>"


class AssessmentRiskModel(Base):
    __tablename__ = "assessment_risks"
    __table_args__ = (UniqueConstraint("assessment_id", "risk_id", name="uq_assessment_risks_pair"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    risk_id = Column(Integer, ForeignKey("risks.id", ondelete="CASCADE"), nullable=False)
    status = Column(db_enum(AssessmentRiskStatus), nullable=False, default=AssessmentRiskStatus.TO_ASSESS)
    notes = Column(Text)
    evidence = Column(Text)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    reviewed_at = Column(DateTime(timezone=True))
