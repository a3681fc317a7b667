"""FastAPI dependency wiring for the voting services.

Separating dependency factories from service implementation modules keeps the
latter free of web-layer concerns, enabling easier reuse in tests and in the
command-line backfill script.
"""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from voting_system.cache import CacheClient, get_cache_client
from voting_system.db.connection import get_db
from voting_system.db.repositories import SqlAlchemyItemCatalog, SqlAlchemyVoteStore
from voting_system.services.listing_service import VoteListingService
from voting_system.services.vote_cache import VoteCache
from voting_system.services.vote_service import VoteService
from voting_system.services.voting_system import VotingSystem
from voting_system.settings import AppSettings, get_settings


def build_voting_system(
    session: AsyncSession,
    cache: CacheClient,
    settings: AppSettings | None = None,
) -> VotingSystem:
    """Assemble a :class:`VotingSystem` from a session and a cache client."""

    settings = settings or get_settings()
    vote_cache = VoteCache(
        cache,
        item_ttl=settings.vote_cache_ttl_seconds,
        collection_ttl=settings.collection_cache_ttl_seconds,
    )
    store = SqlAlchemyVoteStore(session)
    catalog = SqlAlchemyItemCatalog(session)
    votes = VoteService(store, catalog, vote_cache)
    listing = VoteListingService(catalog, votes, vote_cache)
    return VotingSystem(votes=votes, listing=listing, catalog=catalog, cache=cache)


def get_voting_system(
    session: AsyncSession = Depends(get_db),
    cache: CacheClient = Depends(get_cache_client),
) -> VotingSystem:
    """Provide a fully-wired :class:`VotingSystem` per request."""

    return build_voting_system(session, cache)


__all__ = ["build_voting_system", "get_voting_system"]
