"""Vote counter engine: counting, cached reads, and post-write invalidation.

Reads follow the cache-aside pattern: probe the cache, fall back to the
persistent store on a miss and repopulate the cache with the recomputed
aggregate. Writes go to the store first and then delete (never update) the
affected cache entries, so the next read rebuilds them from the source of
truth.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from voting_system.db.repositories import ItemCatalog, VoteStore
from voting_system.errors import InvalidTarget, InvalidVoteKind, PersistenceError
from voting_system.schemas.votes import VoteAggregate, VoteKind
from voting_system.services.vote_cache import VoteCache

logger = logging.getLogger(__name__)


def coerce_vote_kind(vote_kind: VoteKind | str) -> VoteKind:
    if isinstance(vote_kind, VoteKind):
        return vote_kind
    try:
        return VoteKind(str(vote_kind).strip().lower())
    except ValueError as exc:
        raise InvalidVoteKind(vote_kind) from exc


class VoteService:
    """Owns every read and write of vote counters and their cached copies."""

    def __init__(
        self,
        store: VoteStore,
        catalog: ItemCatalog,
        cache: VoteCache,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._cache = cache

    async def ensure_eligible(self, item_id: int | str) -> None:
        if not await self._catalog.is_eligible(item_id):
            logger.info("Rejected request for ineligible item %s", item_id)
            raise InvalidTarget(item_id)

    async def initialize(self, item_id: int | str) -> None:
        """Create zeroed counters for ``item_id`` unless they already exist."""

        created = await self._store.create_if_absent(item_id)
        if created:
            logger.debug("Initialized vote counters for item %s", item_id)
            await self._invalidate(item_id)
        else:
            # A republished item re-enters listings with its existing counters.
            await self._cache.invalidate_listings()

    async def initialize_many(self, item_ids: Iterable[int | str]) -> int:
        """Backfill counters for existing items, returning how many were created."""

        created = 0
        for item_id in item_ids:
            if await self._store.create_if_absent(item_id):
                created += 1
        if created:
            await self._cache.invalidate_listings()
        logger.info("Initialized vote counters for %d item(s)", created)
        return created

    async def cast_vote(
        self, item_id: int | str, vote_kind: VoteKind | str
    ) -> VoteAggregate:
        """Record one vote and return the freshly recomputed aggregate.

        Raises:
            InvalidVoteKind: ``vote_kind`` is not a known direction.
            InvalidTarget: the item is missing or not eligible.
            PersistenceError: the store rejected the write. No retry is attempted.
        """

        kind = coerce_vote_kind(vote_kind)
        await self.ensure_eligible(item_id)

        if not await self._store.increment(item_id, kind):
            # Eligible items created before counters existed are initialized lazily.
            await self._store.create_if_absent(item_id)
            if not await self._store.increment(item_id, kind):
                raise PersistenceError("Failed to update vote count")

        logger.info("Recorded %s for item %s", kind.value, item_id)
        await self._invalidate(item_id)

        aggregate = await self.get_counts(item_id)
        if aggregate is None:
            raise PersistenceError("Vote counters disappeared after update")
        return aggregate

    async def get_counts(self, item_id: int | str) -> VoteAggregate | None:
        """Return the aggregate for ``item_id`` or ``None`` when never initialized."""

        cached = await self._cache.read_counts(item_id)
        if cached is not None:
            return cached

        counts = await self._store.get_counts(item_id)
        if counts is None:
            return None

        aggregate = VoteAggregate.from_counts(*counts)
        if not await self._cache.write_counts(item_id, aggregate):
            logger.debug("Votes for item %s were not cached", item_id)
        return aggregate

    async def reset(self, item_id: int | str) -> None:
        """Administrative reset of both counters to zero."""

        await self._store.reset(item_id)
        logger.info("Reset vote counters for item %s", item_id)
        await self._invalidate(item_id)

    async def _invalidate(self, item_id: int | str) -> None:
        if not await self._cache.invalidate(item_id):
            logger.debug(
                "Cache invalidation skipped or failed for item %s; entries expire via TTL",
                item_id,
            )


__all__ = ["VoteService", "coerce_vote_kind"]
