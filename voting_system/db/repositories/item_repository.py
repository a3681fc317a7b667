"""Item eligibility and enumeration backed by the ``items`` table."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_system.db.models import ELIGIBLE_ITEM_STATUS, ELIGIBLE_ITEM_TYPE, Item
from voting_system.errors import PersistenceError

logger = logging.getLogger(__name__)


class ItemCatalog(Protocol):
    """Host-platform collaborator answering questions about votable items."""

    async def is_eligible(self, item_id: int | str) -> bool:
        """Return ``True`` when the item exists, has the votable type and is published."""

    async def list_eligible_items(self) -> list[tuple[int | str, str]]:
        """Return ``(item_id, title)`` pairs for every eligible item.

        The returned order is the tie-break order of every listing sort, so
        implementations must enumerate deterministically.
        """


class SqlAlchemyItemCatalog:
    """:class:`ItemCatalog` reading the platform's ``items`` table.

    Items are enumerated by ``id`` compared as strings (``"10"`` before
    ``"2"``), matching the column type shared by integer and string ids.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        item_type: str = ELIGIBLE_ITEM_TYPE,
        status: str = ELIGIBLE_ITEM_STATUS,
    ) -> None:
        self._session = session
        self._item_type = item_type
        self._status = status

    async def is_eligible(self, item_id: int | str) -> bool:
        query = select(Item.id).where(
            Item.id == str(item_id),
            Item.item_type == self._item_type,
            Item.status == self._status,
        )
        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as exc:
            logger.error("Eligibility lookup failed for item %s: %s", item_id, exc)
            raise PersistenceError("Failed to look up item") from exc
        return result.scalar_one_or_none() is not None

    async def list_eligible_items(self) -> list[tuple[int | str, str]]:
        query = (
            select(Item.id, Item.title)
            .where(Item.item_type == self._item_type, Item.status == self._status)
            .order_by(Item.id)
        )
        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as exc:
            logger.error("Eligible item enumeration failed: %s", exc)
            raise PersistenceError("Failed to enumerate items") from exc
        return [(row.id, row.title) for row in result]


__all__ = ["ItemCatalog", "SqlAlchemyItemCatalog"]
