"""
Onboarding Routes
=================

Onboarding checklist steps, per-user progress and the progress timeline.

Recording progress recomputes the user's game stats.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404, require_admin
from services.portal.models import OnboardingStepModel, UserProgressModel
from services.portal.services.gamification import get_progress, recompute_game_stats, record_progress, timeline_status
from shared.auth import User, ensure_self_or_admin
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.onboarding import (
    OnboardingStep,
    OnboardingStepCreate,
    ProgressRecord,
    ProgressSave,
    StepType,
    TimelineEntry,
    UserProgress,
)


logger = get_logger(__name__)

router = APIRouter()


async def save_progress(
    db: AsyncSession,
    user_id: int,
    step_id: int,
    record: ProgressRecord,
) -> UserProgress:
    await get_or_404(db, OnboardingStepModel, step_id, "Onboarding step")
    progress = await record_progress(db, user_id, step_id, record)
    await recompute_game_stats(db, user_id)
    return UserProgress.model_validate(progress)


# =============================================================================
# Steps
# =============================================================================


@router.get("/onboarding/steps", response_model=list[OnboardingStep])
async def list_steps(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[OnboardingStep]:
    result = await db.execute(select(OnboardingStepModel).order_by(OnboardingStepModel.order))
    return [OnboardingStep.model_validate(s) for s in result.scalars().all()]


@router.get("/onboarding/steps/type/{step_type}", response_model=list[OnboardingStep])
async def list_steps_by_type(
    step_type: StepType,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[OnboardingStep]:
    result = await db.execute(
        select(OnboardingStepModel)
        .where(OnboardingStepModel.type == step_type)
        .order_by(OnboardingStepModel.order)
    )
    return [OnboardingStep.model_validate(s) for s in result.scalars().all()]


@router.get("/onboarding/steps/{step_id}", response_model=OnboardingStep)
async def get_step(
    step_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> OnboardingStep:
    step = await get_or_404(db, OnboardingStepModel, step_id, "Onboarding step")
    return OnboardingStep.model_validate(step)


@router.post("/onboarding/steps", response_model=OnboardingStep, status_code=status.HTTP_201_CREATED)
async def create_step(
    data: OnboardingStepCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> OnboardingStep:
    step = OnboardingStepModel(**data.model_dump())
    db.add(step)
    await db.flush()

    logger.info("onboarding_step_created", step_id=step.id, type=data.type.value, user_id=current_user.id)
    return OnboardingStep.model_validate(step)


# =============================================================================
# Progress
# =============================================================================


@router.get("/onboarding/progress/{user_id}", response_model=list[UserProgress])
async def list_user_progress(
    user_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[UserProgress]:
    ensure_self_or_admin(current_user, user_id, "view")
    result = await db.execute(
        select(UserProgressModel).where(UserProgressModel.user_id == user_id).order_by(UserProgressModel.step_id)
    )
    return [UserProgress.model_validate(p) for p in result.scalars().all()]


@router.get("/onboarding/progress/{user_id}/{step_id}", response_model=UserProgress)
async def get_user_step_progress(
    user_id: int,
    step_id: int,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserProgress:
    ensure_self_or_admin(current_user, user_id, "view")
    progress = await get_progress(db, user_id, step_id)
    if progress is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Progress not found: user {user_id}, step {step_id}",
        )
    return UserProgress.model_validate(progress)


@router.post("/onboarding/progress", response_model=UserProgress)
async def save_user_progress(
    data: ProgressSave,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserProgress:
    ensure_self_or_admin(current_user, data.user_id, "update")
    record = ProgressRecord.model_validate(data.model_dump(exclude={"user_id", "step_id"}, exclude_unset=True))
    return await save_progress(db, data.user_id, data.step_id, record)


@router.get("/progress/timeline", response_model=list[TimelineEntry])
async def get_timeline(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> list[TimelineEntry]:
    """Every step in order, tagged with the caller's progress on it."""
    steps = await db.execute(select(OnboardingStepModel).order_by(OnboardingStepModel.order))
    rows = await db.execute(select(UserProgressModel).where(UserProgressModel.user_id == current_user.user_id))
    progress_by_step = {p.step_id: p for p in rows.scalars().all()}

    entries = []
    for step in steps.scalars().all():
        progress = progress_by_step.get(step.id)
        entries.append(
            TimelineEntry(
                step=OnboardingStep.model_validate(step),
                status=timeline_status(progress),
                progress=UserProgress.model_validate(progress) if progress else None,
            )
        )
    return entries


@router.post("/progress/{step_id}", response_model=UserProgress)
async def save_own_progress(
    step_id: int,
    data: ProgressRecord,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserProgress:
    return await save_progress(db, current_user.user_id, step_id, data)
