"""
User Admin Routes
=================

Account management for administrators.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import require_admin
from services.portal.models import UserModel
from services.portal.routes.auth import find_user
from shared.auth import User, hash_password
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.common import PaginatedResponse
from shared.models.user import UserAccount, UserCreate


logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[UserAccount])
async def list_users(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> PaginatedResponse[UserAccount]:
    total = (await db.execute(select(func.count()).select_from(UserModel))).scalar() or 0
    result = await db.execute(
        select(UserModel).order_by(UserModel.id).offset((page - 1) * page_size).limit(page_size)
    )
    items = [UserAccount.model_validate(u) for u in result.scalars().all()]
    return PaginatedResponse[UserAccount].build(items, total, page, page_size)


@router.post("", response_model=UserAccount, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(require_admin),
) -> UserAccount:
    """Create an account with an explicit role and access level."""
    if await find_user(db, data.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )

    user = UserModel(
        username=data.username,
        password_hash=hash_password(data.password),
        email=data.email,
        role=data.role,
        access_level=data.access_level,
        company_id=data.company_id,
    )
    db.add(user)
    await db.flush()

    logger.info("user_created", new_user_id=user.id, role=data.role.value, user_id=current_user.id)
    return UserAccount.model_validate(user)
