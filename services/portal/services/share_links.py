"""
Report Share Links
==================

Token generation and access checks for publicly shared reports.

Access is checked in a fixed order: unknown token, unusable link (inactive,
expired, view limit reached), then password.

Version: 0.1.0
"""

import secrets
from datetime import UTC, datetime

from fastapi import HTTPException, status

from services.portal.models import ReportShareLinkModel
from shared.auth import digest_secret, verify_digest
from shared.logging import get_logger


logger = get_logger(__name__)

TOKEN_BYTES = 16


def generate_share_token() -> str:
    """32 hex characters from 16 random bytes."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_share_password(password: str | None) -> str | None:
    return digest_secret(password) if password else None


class ShareAccessDenied(Exception):
    """A shared report cannot be shown."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.detail)


def _as_aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def check_share_access(
    link: ReportShareLinkModel | None,
    password: str | None = None,
    now: datetime | None = None,
) -> ReportShareLinkModel:
    """
    Validate a share link for viewing.

    Raises:
        ShareAccessDenied: 404, 403 or 401 describing the first failed check
    """
    if link is None:
        raise ShareAccessDenied(status.HTTP_404_NOT_FOUND, "Share link not found")

    now = now or datetime.now(UTC)

    if not link.is_active:
        raise ShareAccessDenied(status.HTTP_403_FORBIDDEN, "Share link is no longer active")
    if link.expires_at is not None and _as_aware(link.expires_at) < now:
        raise ShareAccessDenied(status.HTTP_403_FORBIDDEN, "Share link has expired")
    if link.max_views is not None and (link.view_count or 0) >= link.max_views:
        raise ShareAccessDenied(status.HTTP_403_FORBIDDEN, "Share link view limit reached")

    if link.password:
        if not password:
            raise ShareAccessDenied(status.HTTP_401_UNAUTHORIZED, "password_required")
        if not verify_digest(password, link.password):
            logger.warning("share_link_bad_password", link_id=link.id)
            raise ShareAccessDenied(status.HTTP_401_UNAUTHORIZED, "Invalid password")

    return link


def record_view(link: ReportShareLinkModel) -> None:
    link.view_count = (link.view_count or 0) + 1
