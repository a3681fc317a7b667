"""Pydantic schemas describing vote aggregates and listing payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class VoteKind(str, Enum):
    """Direction of a single vote."""

    UPVOTE = "upvote"
    DOWNVOTE = "downvote"


class SortField(str, Enum):
    """Columns the aggregate listing can be ordered by."""

    TITLE = "title"
    UPVOTES = "upvotes"
    DOWNVOTES = "downvotes"
    TOTAL = "total"
    SCORE = "score"


class SortDirection(str, Enum):
    """Ordering direction for the aggregate listing."""

    ASC = "asc"
    DESC = "desc"


class VoteAggregate(BaseModel):
    """Derived view of an item's counters.

    ``total`` and ``score`` are always recomputed from the two counters so a
    cached payload can never disagree with itself.
    """

    upvotes: int = Field(0, ge=0, description="Number of upvotes recorded")
    downvotes: int = Field(0, ge=0, description="Number of downvotes recorded")
    total: int = Field(0, ge=0, description="upvotes + downvotes")
    score: int = Field(0, description="upvotes - downvotes")

    @model_validator(mode="after")
    def _derive_totals(self) -> "VoteAggregate":
        self.total = self.upvotes + self.downvotes
        self.score = self.upvotes - self.downvotes
        return self

    @classmethod
    def from_counts(cls, upvotes: int, downvotes: int) -> "VoteAggregate":
        return cls(upvotes=upvotes, downvotes=downvotes)


class VoteSubmission(BaseModel):
    """Request body accepted by the vote submission endpoint."""

    item_id: int | str = Field(..., description="Identifier of the item being voted on")
    vote_type: VoteKind = Field(..., description="Either 'upvote' or 'downvote'")


class VoteResult(BaseModel):
    """Response returned after a vote was recorded."""

    success: bool = True
    item_id: int | str
    vote_type: VoteKind
    votes: VoteAggregate


class ItemVotes(BaseModel):
    """One row of the aggregate listing."""

    item_id: int | str
    title: str
    upvotes: int = 0
    downvotes: int = 0
    total: int = 0
    score: int = 0

    @classmethod
    def from_aggregate(
        cls, item_id: int | str, title: str, aggregate: VoteAggregate | None
    ) -> "ItemVotes":
        aggregate = aggregate or VoteAggregate()
        return cls(
            item_id=item_id,
            title=title,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            total=aggregate.total,
            score=aggregate.score,
        )


class VoteSummary(BaseModel):
    """Totals across every row of a listing."""

    total_items: int = 0
    total_upvotes: int = 0
    total_downvotes: int = 0
    total_votes: int = 0


class VoteListing(BaseModel):
    """Sorted listing response including the effective sort parameters."""

    order_by: SortField
    direction: SortDirection
    items: list[ItemVotes] = Field(default_factory=list)
    summary: VoteSummary = Field(default_factory=VoteSummary)


class CacheStats(BaseModel):
    """Operational snapshot of the cache tier."""

    available: bool = False
    redis_version: str = "Unknown"
    connected_clients: int = 0
    used_memory_human: str = "0B"
    namespace_keys: int = 0


__all__ = [
    "CacheStats",
    "ItemVotes",
    "SortDirection",
    "SortField",
    "VoteAggregate",
    "VoteKind",
    "VoteListing",
    "VoteResult",
    "VoteSubmission",
    "VoteSummary",
]
