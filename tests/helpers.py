"""
Test Helpers
============

Builders for mocked database results and authenticated users.
"""

from typing import Any
from unittest.mock import MagicMock

from shared.auth import User


def scalar_result(value: Any) -> MagicMock:
    """Result of db.execute() for scalar_one_or_none()/scalar() queries."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = value
    return result


def scalars_result(values: list[Any]) -> MagicMock:
    """Result of db.execute() for scalars().all() and all() queries."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    result.all.return_value = values
    return result


def make_user(user_id: int = 1, roles: list[str] | None = None, company_id: int | None = 1) -> User:
    return User(
        id=str(user_id),
        username=f"user{user_id}",
        email=f"user{user_id}@metaworks.test",
        roles=roles or ["user"],
        company_id=company_id,
    )
