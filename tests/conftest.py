"""
Test Configuration
==================

Pytest fixtures for MetaWorks tests.
"""

import os
from collections.abc import AsyncGenerator
from itertools import count
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def portal_client() -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the portal service."""
    from services.portal.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    AsyncSession stand-in.

    flush() fills column defaults and ids of added objects, like an INSERT would.
    """
    session = AsyncMock()
    added: list[Any] = []
    ids = count(1)

    def add(obj: Any) -> None:
        added.append(obj)

    def add_all(objs: Any) -> None:
        added.extend(objs)

    async def flush() -> None:
        for obj in added:
            if not hasattr(obj, "__table__"):
                continue
            for column in obj.__table__.columns:
                if column.default is None or getattr(obj, column.key, None) is not None:
                    continue
                default = column.default.arg
                setattr(obj, column.key, default(None) if column.default.is_callable else default)
            if getattr(obj, "id", None) is None:
                obj.id = next(ids)

    session.add = MagicMock(side_effect=add)
    session.add_all = MagicMock(side_effect=add_all)
    session.flush = AsyncMock(side_effect=flush)
    session.added = added
    return session


@pytest.fixture
def user():
    from tests.helpers import make_user

    return make_user()


@pytest.fixture
def admin_user():
    from tests.helpers import make_user

    return make_user(user_id=99, roles=["admin"], company_id=None)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Generate test authentication headers."""
    from shared.auth import create_access_token

    token = create_access_token({
        "sub": "1",
        "email": "test@metaworks.test",
        "roles": ["user"],
        "company_id": 1,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    from shared.auth import create_access_token

    token = create_access_token({
        "sub": "99",
        "email": "admin@metaworks.test",
        "roles": ["admin"],
    })
    return {"Authorization": f"Bearer {token}"}
