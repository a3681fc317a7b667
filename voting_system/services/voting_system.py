"""Inbound interface consumed by the HTTP layer and other host-platform glue.

Lifecycle points of the host platform map onto explicit calls:

* ``on_item_published``: an item became eligible; create its counters.
* ``activate``: first installation; backfill counters for existing items.
* ``submit_vote`` / ``fetch_votes`` / ``reset_votes``: per-item requests.
* ``list_items_with_votes``: reporting view.

Authentication and permission checks are expected to have run before any of
these methods is invoked.
"""

from __future__ import annotations

import logging

from voting_system.cache import CacheClient
from voting_system.db.repositories import ItemCatalog
from voting_system.errors import VotesNotFound
from voting_system.schemas.votes import (
    CacheStats,
    SortDirection,
    SortField,
    VoteAggregate,
    VoteKind,
    VoteListing,
    VoteResult,
)
from voting_system.services.listing_service import VoteListingService
from voting_system.services.vote_service import VoteService, coerce_vote_kind

logger = logging.getLogger(__name__)


class VotingSystem:
    """Coordinates the vote counter engine, listing engine and cache tier."""

    def __init__(
        self,
        *,
        votes: VoteService,
        listing: VoteListingService,
        catalog: ItemCatalog,
        cache: CacheClient,
    ) -> None:
        self._votes = votes
        self._listing = listing
        self._catalog = catalog
        self._cache = cache

    async def submit_vote(
        self, item_id: int | str, vote_kind: VoteKind | str
    ) -> VoteResult:
        kind = coerce_vote_kind(vote_kind)
        aggregate = await self._votes.cast_vote(item_id, kind)
        return VoteResult(item_id=item_id, vote_type=kind, votes=aggregate)

    async def fetch_votes(self, item_id: int | str) -> VoteAggregate:
        await self._votes.ensure_eligible(item_id)
        aggregate = await self._votes.get_counts(item_id)
        if aggregate is None:
            raise VotesNotFound(item_id)
        return aggregate

    async def list_items_with_votes(
        self,
        order_by: SortField | str | None = SortField.TITLE,
        direction: SortDirection | str | None = SortDirection.ASC,
    ) -> VoteListing:
        return await self._listing.listing(order_by, direction)

    async def reset_votes(self, item_id: int | str) -> VoteAggregate:
        await self._votes.ensure_eligible(item_id)
        await self._votes.reset(item_id)
        return await self.fetch_votes(item_id)

    async def on_item_published(self, item_id: int | str) -> bool:
        """Initialize counters when ``item_id`` is eligible; report whether it was."""

        if not await self._catalog.is_eligible(item_id):
            return False
        await self._votes.initialize(item_id)
        return True

    async def activate(self) -> int:
        items = await self._catalog.list_eligible_items()
        return await self._votes.initialize_many(item_id for item_id, _ in items)

    async def cache_stats(self) -> CacheStats:
        return await self._cache.stats()

    async def flush_cache(self) -> bool:
        flushed = await self._cache.flush()
        if flushed:
            logger.info("Flushed vote cache namespace %s", self._cache.prefix)
        return flushed


__all__ = ["VotingSystem"]
