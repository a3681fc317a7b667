"""Typed cache helpers for vote aggregates and listing snapshots."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from voting_system.cache import (
    CacheClient,
    collection_key,
    invalidate_collections,
    invalidate_item,
    item_votes_key,
)
from voting_system.schemas.votes import (
    ItemVotes,
    SortDirection,
    SortField,
    VoteAggregate,
)
from voting_system.settings import (
    DEFAULT_COLLECTION_CACHE_TTL_SECONDS,
    DEFAULT_VOTE_CACHE_TTL_SECONDS,
)

logger = logging.getLogger(__name__)


class VoteCache:
    """Wrap cache interactions for vote payloads.

    Only two shapes ever reach the cache: a single :class:`VoteAggregate` per
    item and a list of :class:`ItemVotes` per listing order. Payloads that no
    longer validate against those models are treated as misses, so a stale
    or foreign entry can never leak into a response.
    """

    def __init__(
        self,
        client: CacheClient,
        *,
        item_ttl: int = DEFAULT_VOTE_CACHE_TTL_SECONDS,
        collection_ttl: int = DEFAULT_COLLECTION_CACHE_TTL_SECONDS,
    ) -> None:
        self._client = client
        self._item_ttl = item_ttl
        self._collection_ttl = collection_ttl

    @property
    def client(self) -> CacheClient:
        return self._client

    @property
    def item_ttl(self) -> int:
        return self._item_ttl

    async def read_counts(self, item_id: int | str) -> VoteAggregate | None:
        """Return the cached aggregate for ``item_id`` if present."""

        key = item_votes_key(item_id)
        cached = await self._client.get_json(key)
        if cached is None:
            return None
        try:
            return VoteAggregate.model_validate(cached)
        except ValidationError as exc:
            logger.warning("Ignoring malformed vote cache entry %s: %s", key, exc)
            return None

    async def write_counts(self, item_id: int | str, aggregate: VoteAggregate) -> bool:
        return await self._client.set_json(
            item_votes_key(item_id),
            aggregate.model_dump(mode="json"),
            ttl=self._item_ttl,
        )

    async def read_listing(
        self, order_by: SortField, direction: SortDirection
    ) -> list[ItemVotes] | None:
        """Return a cached sorted listing, preserving the stored order."""

        key = collection_key(order_by.value, direction.value)
        cached = await self._client.get_json(key)
        if cached is None:
            return None
        try:
            return [ItemVotes.model_validate(row) for row in cached]
        except (TypeError, ValidationError) as exc:
            logger.warning("Ignoring malformed listing cache entry %s: %s", key, exc)
            return None

    async def write_listing(
        self,
        order_by: SortField,
        direction: SortDirection,
        rows: list[ItemVotes],
    ) -> bool:
        return await self._client.set_json(
            collection_key(order_by.value, direction.value),
            [row.model_dump(mode="json") for row in rows],
            ttl=self._collection_ttl,
        )

    async def invalidate(self, item_id: int | str) -> bool:
        """Delete the item aggregate and every listing snapshot."""

        return await invalidate_item(self._client, item_id)

    async def invalidate_listings(self) -> bool:
        return await invalidate_collections(self._client)


__all__ = ["VoteCache"]
