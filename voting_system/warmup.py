"""Startup warmup for the database pool and the Redis connection.

Both steps log failures instead of raising: the API must still start when
Redis is down, and a database outage surfaces per request as a
``PersistenceError``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from voting_system.db.connection import begin_engine_transaction

logger = logging.getLogger(__name__)


async def warmup_database(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> bool:
    """Open a pooled connection and issue ``SELECT 1``."""
    try:
        if resolve_engine is None:
            from voting_system.db.connection import get_engine as resolve_engine

        start = time.time()
        engine = resolve_engine()
        async with begin_engine_transaction(engine) as conn:
            await conn.execute(text("SELECT 1"))

        elapsed = (time.time() - start) * 1000
        logger.info(f"✓ Database connection warmed up ({elapsed:.0f}ms)")
        return True
    except Exception as e:
        logger.warning(f"Database warmup failed: {e}")
        return False


async def warmup_redis() -> bool:
    """Establish the shared Redis connection; degrades gracefully when unavailable."""
    from voting_system.cache import get_redis

    start = time.time()
    redis = await get_redis()
    if redis is None:
        logger.info("⚠ Redis warmup skipped (connection unavailable)")
        return False

    elapsed = (time.time() - start) * 1000
    logger.info(f"✓ Redis connection warmed up ({elapsed:.0f}ms)")
    return True


async def warmup_all(
    resolve_engine: Callable[[], AsyncEngine] | None = None,
) -> None:
    logger.info("=" * 60)
    logger.info("Warming up voting system connections...")
    logger.info("=" * 60)

    start = time.time()
    await warmup_database(resolve_engine=resolve_engine)
    await warmup_redis()

    total_elapsed = (time.time() - start) * 1000
    logger.info(f"✓ Warmup complete ({total_elapsed:.0f}ms)")
