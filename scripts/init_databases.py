#!/usr/bin/env python3
"""
Database Initialization Script
==============================

Create the MetaWorks schema, verify Redis and optionally seed reference data.

Usage:
    python scripts/init_databases.py
    python scripts/init_databases.py --postgres-only
    python scripts/init_databases.py --seed

Version: 0.1.0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shared.logging import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False, service_name="init-db")
logger = get_logger(__name__)


async def init_postgres() -> bool:
    """Create all portal tables and verify the connection."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    import services.portal.models  # noqa: F401  registers tables on Base
    from shared.database.postgres import PostgresClient

    logger.info("postgres_init_started")

    try:
        await PostgresClient.create_all()

        async with PostgresClient.get_engine().begin() as conn:
            result = await conn.execute(text("SELECT version()"))
            version = result.scalar()

        logger.info("postgres_init_completed", version=str(version)[:50])
        return True

    except (SQLAlchemyError, OSError) as e:
        logger.error("postgres_init_failed", error=str(e))
        return False


async def init_redis() -> bool:
    """Verify the Redis connection."""
    from redis.exceptions import RedisError

    from shared.database.redis import RedisClient

    logger.info("redis_init_started")

    try:
        client = RedisClient.get_client()
        await client.ping()
        info = await client.info("server")
        logger.info("redis_init_completed", version=info.get("redis_version"))
        return True

    except (RedisError, OSError) as e:
        logger.error("redis_init_failed", error=str(e))
        return False


async def seed_data() -> bool:
    """Seed frameworks, policy categories, onboarding content and sample risks."""
    from sqlalchemy.exc import SQLAlchemyError

    from services.portal.seed import seed_reference_data
    from shared.database.postgres import postgres_session

    logger.info("seed_started")

    try:
        async with postgres_session() as session:
            summary = await seed_reference_data(session)
    except (SQLAlchemyError, OSError) as e:
        logger.error("seed_failed", error=str(e))
        return False

    logger.info("seed_completed", **summary.as_dict())
    return True


async def close_connections() -> None:
    from shared.database.postgres import PostgresClient
    from shared.database.redis import RedisClient

    await PostgresClient.close()
    await RedisClient.close()


async def main(args: argparse.Namespace) -> int:
    """Main initialization function."""
    logger.info("=" * 60)
    logger.info("MetaWorks Database Initialization")
    logger.info("=" * 60)

    results = {}

    try:
        results["PostgreSQL"] = await init_postgres()

        if not args.postgres_only:
            results["Redis"] = await init_redis()

        if args.seed and results["PostgreSQL"]:
            results["Seed Data"] = await seed_data()
    finally:
        await close_connections()

    # Summary
    logger.info("=" * 60)
    logger.info("Initialization Summary")
    logger.info("=" * 60)

    failed = []
    for name, success in results.items():
        status = "OK" if success else "FAILED"
        logger.info(f"  {name}: {status}")
        if not success:
            failed.append(name)

    if failed:
        logger.error(f"Failed: {', '.join(failed)}")
        return 1

    logger.info("All databases initialized successfully!")
    return 0


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Initialize MetaWorks databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--postgres-only",
        action="store_true",
        help="Initialize only PostgreSQL",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Seed reference data (frameworks, onboarding, sample risks)",
    )

    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    exit_code = asyncio.run(main(args))
    sys.exit(exit_code)
