"""
Auth Routes
===========

Local username/password accounts and session tokens.

Version: 0.1.0
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.dependencies import get_account, get_or_404
from services.portal.models import UserModel
from shared.auth import (
    TokenPair,
    User,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)
from shared.config import settings
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.user import (
    ClerkKey,
    DashboardAccess,
    RefreshRequest,
    UserAccount,
    UserRegister,
    UserRole,
)


logger = get_logger(__name__)

router = APIRouter()


def token_claims(user: UserModel) -> dict:
    return {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "roles": user.roles,
        "company_id": user.company_id,
    }


async def find_user(db: AsyncSession, username: str) -> UserModel | None:
    result = await db.execute(select(UserModel).where(UserModel.username == username))
    return result.scalar_one_or_none()


@router.post("/auth/register", response_model=UserAccount, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_postgres_session),
) -> UserAccount:
    """Create a standard user account."""
    if await find_user(db, data.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already exists",
        )

    user = UserModel(
        username=data.username,
        password_hash=hash_password(data.password),
        email=data.email,
        role=UserRole.USER,
        company_id=data.company_id,
    )
    db.add(user)
    await db.flush()

    logger.info("user_registered", user_id=user.id, username=user.username)
    return UserAccount.model_validate(user)


@router.post("/auth/token", response_model=TokenPair)
async def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_postgres_session),
) -> TokenPair:
    """Exchange username and password for an access/refresh token pair."""
    user = await find_user(db, form.username)

    if user is None or not user.password_hash or not verify_password(form.password, user.password_hash):
        logger.warning("login_failed", username=form.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    logger.info("user_logged_in", user_id=user.id)
    return create_token_pair(token_claims(user))


@router.post("/auth/refresh", response_model=TokenPair)
async def refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_postgres_session),
) -> TokenPair:
    """Issue a new token pair; roles and company are re-read from the account."""
    token_data = decode_token(data.refresh_token, verify_type="refresh")
    user = await db.get(UserModel, int(token_data.sub)) if token_data and token_data.sub.isdigit() else None

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return create_token_pair(token_claims(user))


@router.get("/auth/me", response_model=UserAccount)
async def me(
    db: AsyncSession = Depends(get_postgres_session),
    current_user: User = Depends(get_account),
) -> UserAccount:
    user = await get_or_404(db, UserModel, current_user.user_id, "User")
    return UserAccount.model_validate(user)


@router.get("/clerk-key", response_model=ClerkKey)
async def clerk_key() -> ClerkKey:
    """Publishable key the client needs to start Clerk sign-in."""
    if not settings.clerk.publishable_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Clerk publishable key is not configured",
        )
    return ClerkKey(publishable_key=settings.clerk.publishable_key)


@router.get("/dashboard-access", response_model=DashboardAccess)
async def dashboard_access(current_user: User = Depends(get_account)) -> DashboardAccess:
    return DashboardAccess(
        has_admin_access=current_user.is_admin,
        has_user_access=current_user.is_active,
    )
