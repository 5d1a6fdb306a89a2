"""
Portal Dependencies
===================

Request-scoped helpers shared by the portal routers.

Version: 0.1.0
"""

from typing import Any, TypeVar

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from services.portal.models import UserModel
from shared.auth import User, get_current_active_user, require_roles
from shared.config import settings
from shared.database.postgres import get_postgres_session
from shared.logging import get_logger
from shared.models.user import UserRole


logger = get_logger(__name__)

ModelT = TypeVar("ModelT")


async def get_account(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_postgres_session),
) -> User:
    """
    Authenticated caller addressed by local user id.

    Clerk users are linked to a local account on their first request so that
    ownership columns can reference them. Company and role are read from the
    account row, since token claims go stale when the profile changes.
    """
    if current_user.auth_provider != "clerk":
        account = await db.get(UserModel, current_user.user_id) if current_user.id.isdigit() else None
        if account is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not validate credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
    else:
        result = await db.execute(select(UserModel).where(UserModel.clerk_user_id == current_user.id))
        account = result.scalar_one_or_none()

    if account is None:
        account = UserModel(
            username=current_user.id,
            email=current_user.email,
            role=UserRole.ADMIN if current_user.is_admin else UserRole.USER,
            clerk_user_id=current_user.id,
        )
        db.add(account)
        await db.flush()
        logger.info("clerk_user_provisioned", user_id=account.id, clerk_user_id=current_user.id)

    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    roles = account.roles
    if current_user.auth_provider == "clerk":
        roles = sorted(set(current_user.roles) | set(account.roles))

    return current_user.model_copy(
        update={
            "id": str(account.id),
            "username": account.username,
            "company_id": account.company_id,
            "roles": roles,
        }
    )


# Roles come from the account row, so a demoted admin loses access at once.
require_admin = require_roles(["admin"], user_dependency=get_account)


def resolve_company_id(user: User, requested: int | None = None) -> int:
    """
    Company a request acts on.

    Falls back to the caller's company, then to the configured default.
    """
    company_id = requested or user.company_id or settings.default_company_id
    ensure_company_access(user, company_id)
    return company_id


def ensure_company_access(user: User, company_id: int) -> None:
    """Raise 403 unless the caller belongs to the company or is an admin."""
    if user.is_admin:
        return
    if (user.company_id or settings.default_company_id) == company_id:
        return
    logger.warning("company_access_denied", user_id=user.id, company_id=company_id)
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied to this company's data",
    )


async def get_or_404(db: AsyncSession, model: type[ModelT], obj_id: Any, label: str) -> ModelT:
    obj = await db.get(model, obj_id)
    if obj is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found: {obj_id}",
        )
    return obj
