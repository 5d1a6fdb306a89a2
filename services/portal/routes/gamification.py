"""
Gamification Routes
===================

Badges, awarded badges, game statistics and the leaderboard.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404, require_admin
from services.portal.models import BadgeModel, UserBadgeModel, UserGameStatsModel, UserModel
from services.portal.services.gamification import award_badge, get_stats, level_for_points
from shared.auth import User, ensure_self_or_admin, get_optional_user
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.onboarding import (
    Badge,
    BadgeCategory,
    BadgeCreate,
    DisplayToggle,
    GameStats,
    GameStatsPublic,
    GameStatsUpdate,
    UserBadge,
    UserBadgeAward,
)


logger = get_logger(__name__)

router = APIRouter()


# =============================================================================
# Badges
# =============================================================================


@router.get("/badges", response_model=list[Badge])
async def list_badges(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Badge]:
    """All badges; secret badges are only listed for admins."""
    query = select(BadgeModel).order_by(BadgeModel.id)
    if not current_user.is_admin:
        query = query.where(BadgeModel.is_secret.is_(False))
    result = await db.execute(query)
    return [Badge.model_validate(b) for b in result.scalars().all()]


@router.get("/badges/category/{category}", response_model=list[Badge])
async def list_badges_by_category(
    category: BadgeCategory,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[Badge]:
    query = select(BadgeModel).where(BadgeModel.category == category).order_by(BadgeModel.id)
    if not current_user.is_admin:
        query = query.where(BadgeModel.is_secret.is_(False))
    result = await db.execute(query)
    return [Badge.model_validate(b) for b in result.scalars().all()]


@router.get("/badges/{badge_id}", response_model=Badge)
async def get_badge(
    badge_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> Badge:
    badge = await get_or_404(db, BadgeModel, badge_id, "Badge")
    return Badge.model_validate(badge)


@router.post("/badges", response_model=Badge, status_code=status.HTTP_201_CREATED)
async def create_badge(
    data: BadgeCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> Badge:
    badge = BadgeModel(**data.model_dump())
    db.add(badge)
    await db.flush()

    logger.info("badge_created", badge_id=badge.id, user_id=current_user.id)
    return Badge.model_validate(badge)


# =============================================================================
# User badges
# =============================================================================


@router.get("/user-badges/{user_id}", response_model=list[UserBadge])
async def list_user_badges(
    user_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[UserBadge]:
    ensure_self_or_admin(current_user, user_id, "view")
    result = await db.execute(
        select(UserBadgeModel).where(UserBadgeModel.user_id == user_id).order_by(UserBadgeModel.earned_at)
    )
    return [UserBadge.model_validate(b) for b in result.scalars().all()]


@router.post("/user-badges", response_model=UserBadge)
async def award_user_badge(
    data: UserBadgeAward,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserBadge:
    """Award a badge; awarding one the user already holds returns the existing award."""
    ensure_self_or_admin(current_user, data.user_id, "update")
    await get_or_404(db, BadgeModel, data.badge_id, "Badge")

    user_badge, _ = await award_badge(db, data.user_id, data.badge_id)
    return UserBadge.model_validate(user_badge)


@router.patch("/user-badges/{user_badge_id}/display", response_model=UserBadge)
async def toggle_badge_display(
    user_badge_id: int,
    data: DisplayToggle,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserBadge:
    user_badge = await get_or_404(db, UserBadgeModel, user_badge_id, "User badge")
    ensure_self_or_admin(current_user, user_badge.user_id, "update")

    user_badge.displayed = data.displayed
    await db.flush()
    return UserBadge.model_validate(user_badge)


# =============================================================================
# Stats
# =============================================================================


@router.get("/game-stats/{user_id}", response_model=GameStats | GameStatsPublic)
async def get_game_stats(
    user_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User | None = Depends(get_optional_user),
) -> GameStats | GameStatsPublic:
    """
    A user's game stats.

    The owner and admins see every field; anyone else only the public ones.
    """
    stats = await get_stats(db, user_id)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Game stats not found: {user_id}",
        )

    is_owner = current_user is not None and current_user.id.isdigit() and current_user.user_id == user_id
    if current_user is not None and (current_user.is_admin or is_owner):
        return GameStats.model_validate(stats)
    return GameStatsPublic.model_validate(stats)


@router.patch("/game-stats/{user_id}", response_model=GameStats)
async def update_game_stats(
    user_id: int,
    data: GameStatsUpdate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> GameStats:
    ensure_self_or_admin(current_user, user_id, "update")
    await get_or_404(db, UserModel, user_id, "User")

    stats = await get_stats(db, user_id)
    if stats is None:
        stats = UserGameStatsModel(
            user_id=user_id,
            total_points=0,
            level=1,
            streak_days=1,
            completed_steps=0,
            quiz_average=0.0,
        )
        db.add(stats)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(stats, key, value)
    if "total_points" in changes and "level" not in changes:
        stats.level = level_for_points(stats.total_points)
    await db.flush()

    logger.info("game_stats_updated", target_user_id=user_id, fields=sorted(changes), user_id=current_user.id)
    return GameStats.model_validate(stats)


@router.get("/leaderboard", response_model=list[GameStatsPublic])
async def leaderboard(
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_postgres_session),
) -> list[GameStatsPublic]:
    result = await db.execute(
        select(UserGameStatsModel)
        .order_by(UserGameStatsModel.total_points.desc(), UserGameStatsModel.user_id)
        .limit(limit)
    )
    return [GameStatsPublic.model_validate(s) for s in result.scalars().all()]
