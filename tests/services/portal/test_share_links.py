"""
Share Link Tests
================

Tests for report share-link tokens and access checks.

Version: 0.1.0
"""

from datetime import UTC, datetime, timedelta

import pytest

from services.portal.models import ReportShareLinkModel
from services.portal.services.share_links import (
    ShareAccessDenied,
    check_share_access,
    generate_share_token,
    hash_share_password,
    record_view,
)


NOW = datetime(2025, 5, 1, 12, 0, tzinfo=UTC)


def link(**overrides) -> ReportShareLinkModel:
    values = {
        "id": 1,
        "report_id": 7,
        "share_token": "a" * 32,
        "is_active": True,
        "expires_at": None,
        "max_views": None,
        "view_count": 0,
        "password": None,
    }
    values.update(overrides)
    return ReportShareLinkModel(**values)


def denied(**kwargs) -> ShareAccessDenied:
    with pytest.raises(ShareAccessDenied) as exc_info:
        check_share_access(now=NOW, **kwargs)
    return exc_info.value


class TestTokens:
    def test_token_is_32_hex_chars(self) -> None:
        token = generate_share_token()

        assert len(token) == 32
        int(token, 16)

    def test_tokens_differ(self) -> None:
        assert generate_share_token() != generate_share_token()

    def test_password_hashing(self) -> None:
        assert hash_share_password(None) is None
        assert hash_share_password("") is None
        assert len(hash_share_password("pw")) == 64


class TestCheckShareAccess:
    def test_unknown_token(self) -> None:
        error = denied(link=None)

        assert error.status_code == 404

    def test_inactive(self) -> None:
        error = denied(link=link(is_active=False))

        assert error.status_code == 403
        assert error.detail == "Share link is no longer active"

    def test_expired(self) -> None:
        error = denied(link=link(expires_at=NOW - timedelta(minutes=1)))

        assert error.detail == "Share link has expired"

    def test_naive_expiry_treated_as_utc(self) -> None:
        naive = (NOW + timedelta(hours=1)).replace(tzinfo=None)

        assert check_share_access(link(expires_at=naive), now=NOW).id == 1

    def test_view_limit(self) -> None:
        error = denied(link=link(max_views=3, view_count=3))

        assert error.detail == "Share link view limit reached"

    def test_password_required(self) -> None:
        error = denied(link=link(password=hash_share_password("pw")))

        assert error.status_code == 401
        assert error.detail == "password_required"

    def test_wrong_password(self) -> None:
        error = denied(link=link(password=hash_share_password("pw")), password="nope")

        assert error.detail == "Invalid password"

    def test_usability_checked_before_password(self) -> None:
        error = denied(link=link(is_active=False, password=hash_share_password("pw")))

        assert error.status_code == 403

    def test_valid_link(self) -> None:
        shared = link(password=hash_share_password("pw"), max_views=2, view_count=1)

        assert check_share_access(shared, password="pw", now=NOW) is shared

    def test_http_conversion(self) -> None:
        http = ShareAccessDenied(403, "nope").to_http()

        assert http.status_code == 403
        assert http.detail == "nope"


def test_record_view_increments() -> None:
    shared = link(view_count=None)

    record_view(shared)
    record_view(shared)

    assert shared.view_count == 2
