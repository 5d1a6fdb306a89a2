"""
Database Module
===============

Async database clients for MetaWorks data stores.

Clients:
- PostgreSQL (asyncpg + SQLAlchemy): system of record
- Redis (redis.asyncio): cache for AI risk analyses

Usage:
    from shared.database import get_postgres_session

    @router.get("/example")
    async def example(
        db: AsyncSession = Depends(get_postgres_session),
    ):
        result = await db.execute(select(FrameworkModel))
        ...
"""

from shared.database.postgres import (
    Base,
    PostgresClient,
    get_postgres_session,
    postgres_session,
)
from shared.database.redis import RedisClient


__all__ = [
    # PostgreSQL
    "get_postgres_session",
    "postgres_session",
    "PostgresClient",
    "Base",
    # Redis
    "RedisClient",
]
