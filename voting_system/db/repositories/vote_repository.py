"""Persistent storage for per-item vote counters."""

from __future__ import annotations

import logging
from typing import NoReturn, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from voting_system.db.models import VoteCounter
from voting_system.errors import PersistenceError
from voting_system.schemas.votes import VoteKind

logger = logging.getLogger(__name__)

_COUNTER_COLUMNS = {
    VoteKind.UPVOTE: VoteCounter.upvotes,
    VoteKind.DOWNVOTE: VoteCounter.downvotes,
}


class VoteStore(Protocol):
    """Contract the vote counter engine relies on for durable counters."""

    async def get_counts(self, item_id: int | str) -> tuple[int, int] | None:
        """Return ``(upvotes, downvotes)`` or ``None`` when never initialized."""

    async def create_if_absent(self, item_id: int | str) -> bool:
        """Create zeroed counters unless they exist; return ``True`` if created."""

    async def increment(self, item_id: int | str, kind: VoteKind) -> bool:
        """Atomically add one to a counter; ``False`` when no counters exist."""

    async def reset(self, item_id: int | str) -> None:
        """Set both counters to zero, creating them when missing."""


def _normalize_item_id(item_id: int | str) -> str:
    return str(item_id)


class SqlAlchemyVoteStore:
    """SQLAlchemy-backed :class:`VoteStore`.

    Every mutation is committed before the method returns so that cache
    invalidation performed by the caller always follows a durable write.
    Increments are expressed as ``SET col = col + 1`` so concurrent voters
    never lose updates. Driver errors are logged and re-raised as
    :class:`~voting_system.errors.PersistenceError` without the driver text.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _fail(
        self, action: str, item_id: int | str, exc: SQLAlchemyError
    ) -> NoReturn:
        logger.error("Vote store %s failed for item %s: %s", action, item_id, exc)
        try:
            await self._session.rollback()
        except SQLAlchemyError as rollback_exc:
            logger.error("Rollback after failed %s also failed: %s", action, rollback_exc)
        raise PersistenceError(f"Failed to {action} vote counters") from exc

    async def get_counts(self, item_id: int | str) -> tuple[int, int] | None:
        query = select(VoteCounter.upvotes, VoteCounter.downvotes).where(
            VoteCounter.item_id == _normalize_item_id(item_id)
        )
        try:
            result = await self._session.execute(query)
        except SQLAlchemyError as exc:
            await self._fail("read", item_id, exc)
        row = result.one_or_none()
        if row is None:
            return None
        return int(row.upvotes), int(row.downvotes)

    async def create_if_absent(self, item_id: int | str) -> bool:
        key = _normalize_item_id(item_id)
        try:
            existing = await self._session.execute(
                select(VoteCounter.item_id).where(VoteCounter.item_id == key)
            )
            if existing.scalar_one_or_none() is not None:
                return False
            self._session.add(VoteCounter(item_id=key, upvotes=0, downvotes=0))
            await self._session.commit()
        except IntegrityError:
            # A concurrent initializer inserted the row first.
            await self._session.rollback()
            return False
        except SQLAlchemyError as exc:
            await self._fail("initialize", item_id, exc)
        return True

    async def increment(self, item_id: int | str, kind: VoteKind) -> bool:
        column = _COUNTER_COLUMNS[kind]
        statement = (
            update(VoteCounter)
            .where(VoteCounter.item_id == _normalize_item_id(item_id))
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(statement)
            if result.rowcount == 0:
                await self._session.rollback()
                return False
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._fail("update", item_id, exc)
        return True

    async def reset(self, item_id: int | str) -> None:
        key = _normalize_item_id(item_id)
        statement = (
            update(VoteCounter)
            .where(VoteCounter.item_id == key)
            .values(upvotes=0, downvotes=0)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(statement)
            if result.rowcount == 0:
                self._session.add(VoteCounter(item_id=key, upvotes=0, downvotes=0))
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._fail("reset", item_id, exc)


__all__ = ["SqlAlchemyVoteStore", "VoteStore"]
