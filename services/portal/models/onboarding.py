"""
Onboarding Database Models
==========================

SQLAlchemy ORM models for onboarding steps, progress and gamification.

Version: 0.1.0
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from services.portal.models.types import db_enum, utcnow
from shared.database.postgres import Base
from shared.models.onboarding import BadgeCategory, StepType


class OnboardingStepModel(Base):
    __tablename__ = "onboarding_steps"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    order = Column(Integer, nullable=False)
    type = Column(db_enum(StepType), nullable=False)
    content = Column(JSON, default=dict)
    points = Column(Integer, nullable=False, default=10)
    estimated_duration = Column(Integer)  # minutes
    prerequisite_step_ids = Column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<OnboardingStep {self.id}: {self.title}>"


class UserProgressModel(Base):
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "step_id", name="uq_user_progress_step"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    step_id = Column(Integer, ForeignKey("onboarding_steps.id", ondelete="CASCADE"), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    score = Column(Integer)
    answers = Column(JSON)
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True))
    attempts = Column(Integer, nullable=False, default=1)
    feedback = Column(Text)


class BadgeModel(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    image_url = Column(String(1024))
    category = Column(db_enum(BadgeCategory), nullable=False)
    required_points = Column(Integer)
    required_steps = Column(JSON, default=list)
    is_secret = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Badge {self.id}: {self.name}>"


class UserBadgeModel(Base):
    __tablename__ = "user_badges"
    __table_args__ = (UniqueConstraint("user_id", "badge_id", name="uq_user_badges_pair"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    badge_id = Column(Integer, ForeignKey("badges.id", ondelete="CASCADE"), nullable=False)
    earned_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    displayed = Column(Boolean, nullable=False, default=True)


class UserGameStatsModel(Base):
    __tablename__ = "user_game_stats"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    total_points = Column(Integer, nullable=False, default=0)
    level = Column(Integer, nullable=False, default=1)
    streak_days = Column(Integer, nullable=False, default=1)
    last_activity = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_steps = Column(Integer, nullable=False, default=0)
    quiz_average = Column(Float, nullable=False, default=0.0)
    fastest_completion_time = Column(Integer)  # seconds

    def __repr__(self) -> str:
        return f"<UserGameStats user {self.user_id}: level {self.level}>"
