"""
Clerk Session Verification
==========================

Verifies RS256 session tokens issued by Clerk against the instance JWKS.

Version: 0.1.0
"""

import time
from datetime import UTC, datetime
from typing import Any

import httpx
from jose import JWTError, jwt

from shared.auth.jwt import TokenData
from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)


class ClerkVerifier:
    """
    Fetches and caches the Clerk JWKS and validates session tokens.

    Roles are read from the `role` claim, or from `metadata.role` /
    `public_metadata.role` when the instance exposes user metadata through a
    custom session template.
    """

    def __init__(
        self,
        jwks_url: str | None = None,
        issuer: str | None = None,
        cache_seconds: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._jwks_url = jwks_url if jwks_url is not None else settings.clerk.jwks_url
        self._issuer = issuer if issuer is not None else settings.clerk.issuer
        self._cache_seconds = (
            cache_seconds if cache_seconds is not None else settings.clerk.jwks_cache_seconds
        )
        self._transport = transport
        self._keys: list[dict[str, Any]] = []
        self._fetched_at = 0.0

    async def _get_keys(self, force: bool = False) -> list[dict[str, Any]]:
        stale = time.monotonic() - self._fetched_at > self._cache_seconds
        if self._keys and not stale and not force:
            return self._keys

        async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
            response = await client.get(self._jwks_url)
            response.raise_for_status()
            self._keys = response.json().get("keys", [])
            self._fetched_at = time.monotonic()

        logger.info("clerk_jwks_refreshed", keys=len(self._keys))
        return self._keys

    async def _find_key(self, kid: str | None) -> dict[str, Any] | None:
        for force in (False, True):
            keys = await self._get_keys(force=force)
            for key in keys:
                if key.get("kid") == kid:
                    return key
        return None

    async def verify(self, token: str) -> TokenData | None:
        """
        Validate a Clerk session token.

        Returns:
            TokenData with token_type "clerk", or None if the token is invalid
        """
        if not self._jwks_url:
            return None

        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            return None

        if header.get("alg") != "RS256":
            return None

        try:
            key = await self._find_key(header.get("kid"))
        except httpx.HTTPError as e:
            logger.error("clerk_jwks_fetch_failed", error=str(e))
            return None

        if key is None:
            logger.warning("clerk_signing_key_unknown", kid=header.get("kid"))
            return None

        options = {"verify_aud": False, "verify_iss": bool(self._issuer)}
        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                issuer=self._issuer or None,
                options=options,
            )
        except JWTError as e:
            logger.warning("clerk_token_invalid", error=str(e))
            return None

        return TokenData(
            sub=str(claims["sub"]),
            roles=_extract_roles(claims),
            exp=datetime.fromtimestamp(claims["exp"], tz=UTC),
            iat=datetime.fromtimestamp(claims.get("iat", 0), tz=UTC),
            token_type="clerk",
            email=claims.get("email"),
            username=claims.get("username") or claims.get("email"),
        )


def _extract_roles(claims: dict[str, Any]) -> list[str]:
    role = claims.get("role")
    for holder in ("metadata", "public_metadata"):
        if role is None and isinstance(claims.get(holder), dict):
            role = claims[holder].get("role")
    return [role] if role else ["user"]


_verifier: ClerkVerifier | None = None


def get_clerk_verifier() -> ClerkVerifier:
    """Get the process-wide Clerk verifier."""
    global _verifier
    if _verifier is None:
        _verifier = ClerkVerifier()
    return _verifier


def set_clerk_verifier(verifier: ClerkVerifier | None) -> None:
    """Replace the process-wide verifier (None resets it)."""
    global _verifier
    _verifier = verifier
