"""
Onboarding Models
=================

Onboarding steps, per-user progress, badges and game statistics.

Version: 0.1.0
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from shared.models.common import ORMModel


class StepType(str, Enum):
    LEARNING = "learning"
    QUIZ = "quiz"
    TASK = "task"
    ASSESSMENT = "assessment"


class BadgeCategory(str, Enum):
    ACHIEVEMENT = "achievement"
    LEARNING = "learning"
    PARTICIPATION = "participation"


class TimelineStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# =============================================================================
# Steps and progress
# =============================================================================


class OnboardingStepCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    order: int = Field(..., ge=0)
    type: StepType
    content: dict[str, Any] = Field(default_factory=dict)
    points: int = Field(default=10, ge=0)
    estimated_duration: int | None = Field(default=None, ge=0, description="Minutes")
    prerequisite_step_ids: list[int] = Field(default_factory=list)


class OnboardingStep(ORMModel):
    id: int
    title: str
    description: str | None = None
    order: int
    type: StepType
    content: dict[str, Any] = Field(default_factory=dict)
    points: int = 10
    estimated_duration: int | None = None
    prerequisite_step_ids: list[int] = Field(default_factory=list)


class ProgressRecord(BaseModel):
    """Progress update; omitted fields keep their stored values."""

    completed: bool | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    answers: dict[str, Any] | None = None
    feedback: str | None = None


class ProgressSave(ProgressRecord):
    """Progress update addressed by user and step in the body."""

    user_id: int
    step_id: int


class UserProgress(ORMModel):
    id: int
    user_id: int
    step_id: int
    completed: bool = False
    score: int | None = None
    answers: dict[str, Any] | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    attempts: int = 0
    feedback: str | None = None


class TimelineEntry(BaseModel):
    step: OnboardingStep
    status: TimelineStatus
    progress: UserProgress | None = None


# =============================================================================
# Badges and stats
# =============================================================================


class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    image_url: str | None = None
    category: BadgeCategory
    required_points: int | None = Field(default=None, ge=0)
    required_steps: list[int] = Field(default_factory=list)
    is_secret: bool = False


class Badge(ORMModel):
    id: int
    name: str
    description: str
    image_url: str | None = None
    category: BadgeCategory
    required_points: int | None = None
    required_steps: list[int] = Field(default_factory=list)
    is_secret: bool = False


class UserBadgeAward(BaseModel):
    user_id: int
    badge_id: int


class UserBadge(ORMModel):
    id: int
    user_id: int
    badge_id: int
    earned_at: datetime | None = None
    displayed: bool = True


class DisplayToggle(BaseModel):
    displayed: bool


class GameStatsPublic(ORMModel):
    """Stats visible without authentication."""

    user_id: int
    level: int
    total_points: int
    completed_steps: int


class GameStats(GameStatsPublic):
    id: int
    streak_days: int = 1
    last_activity: datetime | None = None
    quiz_average: float = 0.0
    fastest_completion_time: int | None = None


class GameStatsUpdate(BaseModel):
    total_points: int | None = Field(default=None, ge=0)
    level: int | None = Field(default=None, ge=1)
    streak_days: int | None = Field(default=None, ge=0)
    fastest_completion_time: int | None = Field(default=None, ge=0)
