"""Shared fixtures wiring the voting services to in-memory collaborators."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tests.voting_system.support.in_memory import (
    InMemoryItemCatalog,
    InMemoryRedis,
    InMemoryVoteStore,
)
from voting_system.cache import CacheClient
from voting_system.db.models import Base
from voting_system.services.listing_service import VoteListingService
from voting_system.services.vote_cache import VoteCache
from voting_system.services.vote_service import VoteService
from voting_system.services.voting_system import VotingSystem


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    """Provide an in-memory SQLite session with freshly created tables."""
    pytest.importorskip("aiosqlite")
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()
    await engine.dispose()


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def cache_client(fake_redis: InMemoryRedis) -> CacheClient:
    return CacheClient(fake_redis, prefix="test_votes:")


@pytest.fixture
def vote_cache(cache_client: CacheClient) -> VoteCache:
    return VoteCache(cache_client, item_ttl=3600, collection_ttl=1800)


@pytest.fixture
def store() -> InMemoryVoteStore:
    return InMemoryVoteStore()


@pytest.fixture
def catalog() -> InMemoryItemCatalog:
    return InMemoryItemCatalog()


@pytest.fixture
def vote_service(
    store: InMemoryVoteStore, catalog: InMemoryItemCatalog, vote_cache: VoteCache
) -> VoteService:
    return VoteService(store, catalog, vote_cache)


@pytest.fixture
def listing_service(
    catalog: InMemoryItemCatalog, vote_service: VoteService, vote_cache: VoteCache
) -> VoteListingService:
    return VoteListingService(catalog, vote_service, vote_cache)


@pytest.fixture
def voting(
    vote_service: VoteService,
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    cache_client: CacheClient,
) -> VotingSystem:
    return VotingSystem(
        votes=vote_service,
        listing=listing_service,
        catalog=catalog,
        cache=cache_client,
    )
