#!/usr/bin/env python3
"""
Create the voting tables and backfill counters for already published items.

Usage:
    python scripts/init_votes.py
    python scripts/init_votes.py --skip-backfill
    python scripts/init_votes.py --flush-cache
"""
import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from voting_system.cache import close_redis, get_cache_client
from voting_system.db.connection import (
    dispose_engine,
    get_async_session_context,
    get_engine,
)
from voting_system.db.models import Base
from voting_system.main import validate_environment
from voting_system.services.dependencies import build_voting_system


async def init_votes(*, backfill: bool, flush_cache: bool) -> None:
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Database tables created successfully")

    cache = await get_cache_client()
    try:
        async with get_async_session_context() as session:
            voting = build_voting_system(session, cache)
            if backfill:
                created = await voting.activate()
                print(f"✓ Initialized vote counters for {created} item(s)")
            if flush_cache:
                if await voting.flush_cache():
                    print(f"✓ Flushed cache namespace {cache.prefix}")
                else:
                    print("⚠ Cache flush skipped (Redis unavailable)")
    finally:
        await close_redis()
        await dispose_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "--skip-backfill",
        action="store_true",
        help="Only create tables; do not initialize counters for existing items",
    )
    parser.add_argument(
        "--flush-cache",
        action="store_true",
        help="Delete every cached vote entry after initialization",
    )
    args = parser.parse_args()

    validate_environment()
    asyncio.run(init_votes(backfill=not args.skip_backfill, flush_cache=args.flush_cache))


if __name__ == "__main__":
    main()
