"""Sorted reporting view across every eligible item's vote aggregate."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from voting_system.db.repositories import ItemCatalog
from voting_system.schemas.votes import (
    ItemVotes,
    SortDirection,
    SortField,
    VoteListing,
    VoteSummary,
)
from voting_system.services.vote_cache import VoteCache
from voting_system.services.vote_service import VoteService

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")

# Column names used by the legacy admin dashboard.
_ORDER_BY_ALIASES = {
    "post_title": SortField.TITLE,
    "total_votes": SortField.TOTAL,
}
_DIRECTION_ALIASES = {
    "asc": SortDirection.ASC,
    "ascending": SortDirection.ASC,
    "desc": SortDirection.DESC,
    "descending": SortDirection.DESC,
}


def natural_sort_key(value: str) -> tuple[Any, ...]:
    """Case-insensitive natural ordering key (``"item 2"`` sorts before ``"item 10"``).

    Splitting on digit runs yields text at even positions and numbers at odd
    positions, so tuples never compare a string against an integer.
    """

    parts = _DIGITS.split(value.casefold())
    return tuple(int(part) if index % 2 else part for index, part in enumerate(parts))


def normalize_order_by(value: SortField | str | None) -> SortField:
    """Map ``value`` onto the allow-list, falling back to ``title``."""

    if isinstance(value, SortField):
        return value
    candidate = (value or "").strip().lower()
    if candidate in _ORDER_BY_ALIASES:
        return _ORDER_BY_ALIASES[candidate]
    try:
        return SortField(candidate)
    except ValueError:
        logger.debug("Unknown listing order %r; falling back to title", value)
        return SortField.TITLE


def normalize_direction(value: SortDirection | str | None) -> SortDirection:
    """Map ``value`` onto a direction, falling back to ascending."""

    if isinstance(value, SortDirection):
        return value
    return _DIRECTION_ALIASES.get((value or "").strip().lower(), SortDirection.ASC)


def _sort_key(order_by: SortField) -> Callable[[ItemVotes], Any]:
    if order_by is SortField.TITLE:
        return lambda row: natural_sort_key(row.title)
    attribute = order_by.value
    return lambda row: getattr(row, attribute)


def sort_rows(
    rows: Sequence[ItemVotes], order_by: SortField, direction: SortDirection
) -> list[ItemVotes]:
    """Stable sort; ties keep enumeration order in both directions."""

    return sorted(
        rows,
        key=_sort_key(order_by),
        reverse=direction is SortDirection.DESC,
    )


def _covers(
    rows: Sequence[ItemVotes], items: Sequence[tuple[int | str, str]]
) -> bool:
    """Return ``True`` when ``rows`` lists exactly the catalog's current items."""

    cached = sorted((str(row.item_id), row.title) for row in rows)
    current = sorted((str(item_id), title or "") for item_id, title in items)
    return cached == current


def summarize(rows: Sequence[ItemVotes]) -> VoteSummary:
    total_upvotes = sum(row.upvotes for row in rows)
    total_downvotes = sum(row.downvotes for row in rows)
    return VoteSummary(
        total_items=len(rows),
        total_upvotes=total_upvotes,
        total_downvotes=total_downvotes,
        total_votes=total_upvotes + total_downvotes,
    )


class VoteListingService:
    """Build the reporting listing on top of :class:`VoteService` reads.

    Every call enumerates the catalog. A cached snapshot for
    ``(order_by, direction)`` is served only when it covers exactly the
    current ``(item_id, title)`` pairs; otherwise the rows are rebuilt from
    one cached read per eligible item. Votes and resets drop every snapshot.
    """

    def __init__(
        self,
        catalog: ItemCatalog,
        votes: VoteService,
        cache: VoteCache,
    ) -> None:
        self._catalog = catalog
        self._votes = votes
        self._cache = cache

    async def list(
        self,
        order_by: SortField | str | None = SortField.TITLE,
        direction: SortDirection | str | None = SortDirection.ASC,
    ) -> list[ItemVotes]:
        field = normalize_order_by(order_by)
        order = normalize_direction(direction)

        items = await self._catalog.list_eligible_items()
        cached = await self._cache.read_listing(field, order)
        if cached is not None and _covers(cached, items):
            return cached

        rows: list[ItemVotes] = []
        for item_id, title in items:
            aggregate = await self._votes.get_counts(item_id)
            rows.append(ItemVotes.from_aggregate(item_id, title or "", aggregate))

        ordered = sort_rows(rows, field, order)
        await self._cache.write_listing(field, order, ordered)
        return ordered

    async def listing(
        self,
        order_by: SortField | str | None = SortField.TITLE,
        direction: SortDirection | str | None = SortDirection.ASC,
    ) -> VoteListing:
        """Return the sorted rows together with the effective order and totals."""

        field = normalize_order_by(order_by)
        order = normalize_direction(direction)
        rows = await self.list(field, order)
        return VoteListing(
            order_by=field,
            direction=order,
            items=rows,
            summary=summarize(rows),
        )


__all__ = [
    "VoteListingService",
    "natural_sort_key",
    "normalize_direction",
    "normalize_order_by",
    "sort_rows",
    "summarize",
]
