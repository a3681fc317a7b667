from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ELIGIBLE_ITEM_TYPE = "post"
ELIGIBLE_ITEM_STATUS = "publish"


class Base(DeclarativeBase):
    pass


class Item(Base):
    """Votable content owned by the host platform.

    The voting core only reads this table to decide eligibility and to
    enumerate items for reporting.
    """

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    item_type: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ELIGIBLE_ITEM_TYPE, index=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="draft", index=True
    )


class VoteCounter(Base):
    """Authoritative per-item vote counters.

    A row exists once the item has been initialized; a missing row means the
    item was never initialized, which is distinct from zero counters.
    """

    __tablename__ = "vote_counters"
    __table_args__ = (
        CheckConstraint("upvotes >= 0", name="ck_vote_counters_upvotes_non_negative"),
        CheckConstraint(
            "downvotes >= 0", name="ck_vote_counters_downvotes_non_negative"
        ),
    )

    item_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    upvotes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    downvotes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )


__all__ = [
    "Base",
    "ELIGIBLE_ITEM_STATUS",
    "ELIGIBLE_ITEM_TYPE",
    "Item",
    "VoteCounter",
]
