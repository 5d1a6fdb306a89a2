"""
FastAPI Authentication Dependencies
===================================

Dependency injection for route protection.

Local username/password sessions use HS256 tokens minted by this service;
when Clerk is configured its RS256 session tokens are accepted as well.

Version: 0.1.0
"""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, Field

from shared.auth.clerk import get_clerk_verifier
from shared.auth.jwt import TokenData, decode_token
from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)

# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/auth/token",
    auto_error=False,
)


class User(BaseModel):
    """Authenticated user model for dependency injection."""

    id: str = Field(..., description="Local user id, or the Clerk subject before linking")
    username: str | None = Field(default=None, description="Username")
    email: str | None = Field(default=None, description="User email")
    roles: list[str] = Field(default_factory=list, description="User roles")
    company_id: int | None = Field(default=None, description="Associated company ID")
    is_active: bool = Field(default=True, description="Whether user is active")
    auth_provider: str = Field(default="local", description="local or clerk")

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    @property
    def user_id(self) -> int:
        """Numeric local user id."""
        return int(self.id)


def _user_from_token(token_data: TokenData) -> User:
    return User(
        id=token_data.sub,
        username=token_data.username,
        email=token_data.email,
        roles=token_data.roles,
        company_id=token_data.company_id,
        auth_provider="clerk" if token_data.token_type == "clerk" else "local",
    )


async def _resolve_token(token: str) -> TokenData | None:
    token_data = decode_token(token, verify_type="access")
    if token_data is None and settings.clerk.enabled:
        token_data = await get_clerk_verifier().verify(token)
    return token_data


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> User:
    """
    Extract and validate user from a bearer token.

    Raises:
        HTTPException: 401 if token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token is None:
        logger.debug("auth_token_missing")
        raise credentials_exception

    token_data = await _resolve_token(token)

    if token_data is None:
        logger.warning("auth_token_invalid")
        raise credentials_exception

    logger.debug("user_authenticated", user_id=token_data.sub, provider=token_data.token_type)

    return _user_from_token(token_data)


async def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> User | None:
    """Like get_current_user, but anonymous requests yield None."""
    if token is None:
        return None
    return await get_current_user(token)


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Ensure the current user is active.

    Raises:
        HTTPException: 403 if user is inactive
    """
    if not current_user.is_active:
        logger.warning("inactive_user_access_attempt", user_id=current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )
    return current_user


def require_roles(
    required_roles: list[str],
    require_all: bool = False,
    user_dependency: Callable[..., Any] = get_current_active_user,
) -> Callable[[User], User]:
    """
    Create a dependency that requires specific roles.

    Args:
        required_roles: List of role names required
        require_all: If True, user must have ALL roles. If False, ANY role suffices.
        user_dependency: Dependency resolving the caller whose roles are checked

    Usage:
        @router.get("/users")
        async def list_users(user: User = Depends(require_roles(["admin"]))):
            ...
    """

    async def role_checker(
        current_user: Annotated[User, Depends(user_dependency)],
    ) -> User:
        user_roles = set(current_user.roles)
        required = set(required_roles)

        if require_all:
            has_roles = required.issubset(user_roles)
        else:
            has_roles = bool(required.intersection(user_roles))

        if not has_roles:
            logger.warning(
                "insufficient_roles",
                user_id=current_user.id,
                user_roles=list(user_roles),
                required_roles=required_roles,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Admin access required",
            )

        return current_user

    return role_checker


def ensure_self_or_admin(current_user: User, user_id: int, action: str = "access") -> None:
    """
    Raise 403 unless the caller is the given user or an admin.

    Args:
        current_user: Authenticated caller
        user_id: Owner of the resource
        action: Verb used in the error message
    """
    if current_user.is_admin:
        return
    if current_user.id.isdigit() and current_user.user_id == user_id:
        return
    logger.warning(
        "cross_user_access_denied",
        user_id=current_user.id,
        target_user_id=user_id,
        action=action,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"Cannot {action} another user's data",
    )
