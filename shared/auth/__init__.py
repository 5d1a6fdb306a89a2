"""
Authentication Module
=====================

Authentication and authorization for MetaWorks services.

Features:
- Local JWT sessions (username/password, bcrypt)
- Clerk session tokens verified against the instance JWKS
- Role-based access control
- FastAPI dependencies for route protection

Usage:
    from shared.auth import get_current_user, require_roles, User

    @router.get("/protected")
    async def protected(user: User = Depends(get_current_user)):
        return {"user": user.email}

    @router.post("/frameworks")
    async def create(user: User = Depends(require_roles(["admin"]))):
        ...
"""

from shared.auth.clerk import ClerkVerifier, get_clerk_verifier, set_clerk_verifier
from shared.auth.dependencies import (
    User,
    ensure_self_or_admin,
    get_current_active_user,
    get_current_user,
    get_optional_user,
    oauth2_scheme,
    require_roles,
)
from shared.auth.jwt import (
    TokenData,
    TokenPair,
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
)
from shared.auth.password import (
    digest_secret,
    hash_password,
    verify_digest,
    verify_password,
)


__all__ = [
    # JWT
    "create_access_token",
    "create_refresh_token",
    "create_token_pair",
    "decode_token",
    "TokenData",
    "TokenPair",
    # Clerk
    "ClerkVerifier",
    "get_clerk_verifier",
    "set_clerk_verifier",
    # Password
    "hash_password",
    "verify_password",
    "digest_secret",
    "verify_digest",
    # Dependencies
    "User",
    "get_current_user",
    "get_current_active_user",
    "get_optional_user",
    "require_roles",
    "ensure_self_or_admin",
    "oauth2_scheme",
]
