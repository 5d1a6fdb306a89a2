"""
Onboarding Gamification
=======================

Progress recording, game statistics and badge awards.

Rules:
- total_points: sum of points of completed steps
- level: one level per 100 points, starting at 1
- quiz_average: mean score of completed steps that carry a score
- streak: +1 when the previous activity was one day ago, reset after a gap

Version: 0.1.0
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.models import (
    BadgeModel,
    OnboardingStepModel,
    UserBadgeModel,
    UserGameStatsModel,
    UserProgressModel,
)
from shared.logging import get_logger
from shared.models.onboarding import ProgressRecord, TimelineStatus


logger = get_logger(__name__)

POINTS_PER_LEVEL = 100
SECONDS_PER_DAY = 24 * 60 * 60


# =============================================================================
# Pure rules
# =============================================================================


@dataclass
class StatTotals:
    total_points: int = 0
    completed_steps: int = 0
    quiz_average: float = 0.0

    @property
    def level(self) -> int:
        return level_for_points(self.total_points)


def level_for_points(points: int) -> int:
    return max(1, points // POINTS_PER_LEVEL + 1)


def compute_totals(progress: list[tuple[UserProgressModel, int]]) -> StatTotals:
    """
    Aggregate a user's progress rows.

    Args:
        progress: (progress row, points of its step) pairs
    """
    totals = StatTotals()
    scores: list[int] = []
    for row, points in progress:
        if not row.completed:
            continue
        totals.completed_steps += 1
        totals.total_points += points or 0
        if row.score is not None:
            scores.append(row.score)
    if scores:
        totals.quiz_average = sum(scores) / len(scores)
    return totals


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def next_streak(current: int, last_activity: datetime | None, now: datetime) -> int:
    """Whole days elapsed since the last activity decide the streak."""
    if last_activity is None:
        return current
    days = int((now - _as_aware(last_activity)).total_seconds() // SECONDS_PER_DAY)
    if days == 1:
        return current + 1
    if days > 1:
        return 1
    return current


def timeline_status(progress: UserProgressModel | None) -> TimelineStatus:
    if progress is None:
        return TimelineStatus.NOT_STARTED
    if progress.completed:
        return TimelineStatus.COMPLETED
    return TimelineStatus.IN_PROGRESS


# =============================================================================
# Progress
# =============================================================================


async def get_progress(db: AsyncSession, user_id: int, step_id: int) -> UserProgressModel | None:
    result = await db.execute(
        select(UserProgressModel).where(
            UserProgressModel.user_id == user_id,
            UserProgressModel.step_id == step_id,
        )
    )
    return result.scalar_one_or_none()


async def record_progress(
    db: AsyncSession,
    user_id: int,
    step_id: int,
    record: ProgressRecord,
    now: datetime | None = None,
) -> UserProgressModel:
    """
    Create or update the user's progress on a step.

    The first record starts the step with one attempt; later records add an
    attempt and only overwrite the fields that were sent.
    """
    now = now or datetime.now(UTC)
    progress = await get_progress(db, user_id, step_id)
    changes = record.model_dump(exclude_unset=True, exclude_none=True)

    if progress is None:
        progress = UserProgressModel(
            user_id=user_id,
            step_id=step_id,
            completed=changes.get("completed", False),
            score=changes.get("score"),
            answers=changes.get("answers"),
            feedback=changes.get("feedback"),
            started_at=now,
            attempts=1,
        )
        db.add(progress)
    else:
        for key, value in changes.items():
            setattr(progress, key, value)
        progress.attempts = (progress.attempts or 0) + 1

    if progress.completed and progress.completed_at is None:
        progress.completed_at = now

    await db.flush()

    logger.info(
        "onboarding_progress_recorded",
        user_id=user_id,
        step_id=step_id,
        completed=progress.completed,
        attempts=progress.attempts,
    )
    return progress


# =============================================================================
# Stats and badges
# =============================================================================


async def get_stats(db: AsyncSession, user_id: int) -> UserGameStatsModel | None:
    result = await db.execute(select(UserGameStatsModel).where(UserGameStatsModel.user_id == user_id))
    return result.scalar_one_or_none()


async def recompute_game_stats(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> UserGameStatsModel:
    """
    Rebuild a user's stats from their progress, then award earned badges.

    Missing stats start at 0 points, level 1 and a one-day streak.
    """
    now = now or datetime.now(UTC)

    rows = await db.execute(
        select(UserProgressModel, OnboardingStepModel.points)
        .join(OnboardingStepModel, UserProgressModel.step_id == OnboardingStepModel.id)
        .where(UserProgressModel.user_id == user_id)
    )
    totals = compute_totals([(row, points) for row, points in rows.all()])

    stats = await get_stats(db, user_id)
    if stats is None:
        stats = UserGameStatsModel(
            user_id=user_id,
            total_points=0,
            level=1,
            streak_days=1,
            completed_steps=0,
            quiz_average=0.0,
            last_activity=now,
        )
        db.add(stats)
    else:
        stats.streak_days = next_streak(stats.streak_days or 1, stats.last_activity, now)
        stats.last_activity = now

    stats.total_points = totals.total_points
    stats.level = totals.level
    stats.completed_steps = totals.completed_steps
    stats.quiz_average = totals.quiz_average

    await db.flush()
    await award_earned_badges(db, user_id, stats.total_points, now=now)

    logger.info(
        "game_stats_recomputed",
        user_id=user_id,
        total_points=stats.total_points,
        level=stats.level,
        streak_days=stats.streak_days,
    )
    return stats


async def award_badge(
    db: AsyncSession,
    user_id: int,
    badge_id: int,
    now: datetime | None = None,
) -> tuple[UserBadgeModel, bool]:
    """
    Award a badge once.

    Returns:
        The user badge and whether it was newly created
    """
    result = await db.execute(
        select(UserBadgeModel).where(
            UserBadgeModel.user_id == user_id,
            UserBadgeModel.badge_id == badge_id,
        )
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        return existing, False

    user_badge = UserBadgeModel(
        user_id=user_id,
        badge_id=badge_id,
        earned_at=now or datetime.now(UTC),
        displayed=True,
    )
    db.add(user_badge)
    await db.flush()

    logger.info("badge_awarded", user_id=user_id, badge_id=badge_id)
    return user_badge, True


async def award_earned_badges(
    db: AsyncSession,
    user_id: int,
    total_points: int,
    now: datetime | None = None,
) -> list[UserBadgeModel]:
    """Award every point-threshold badge the user now qualifies for."""
    eligible = await db.execute(
        select(BadgeModel).where(
            BadgeModel.required_points.is_not(None),
            BadgeModel.required_points <= total_points,
        )
    )
    owned = await db.execute(select(UserBadgeModel.badge_id).where(UserBadgeModel.user_id == user_id))
    owned_ids = set(owned.scalars().all())

    awarded = []
    for badge in eligible.scalars().all():
        if badge.id in owned_ids:
            continue
        user_badge = UserBadgeModel(
            user_id=user_id,
            badge_id=badge.id,
            earned_at=now or datetime.now(UTC),
            displayed=True,
        )
        db.add(user_badge)
        awarded.append(user_badge)
        logger.info("badge_auto_awarded", user_id=user_id, badge_id=badge.id)

    if awarded:
        await db.flush()
    return awarded
