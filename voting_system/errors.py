"""Exceptions raised by the vote counter and listing engines.

Each exception carries a stable ``kind`` string alongside a caller-safe
``message`` so transport layers can translate failures into structured
responses without inspecting store-specific error text.
"""

from __future__ import annotations


class VotingError(Exception):
    """Base class for every failure surfaced by the voting core."""

    kind = "voting_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class InvalidTarget(VotingError):
    """The item does not exist or is not eligible for voting."""

    kind = "invalid_target"

    def __init__(self, item_id: int | str) -> None:
        super().__init__(f"Item {item_id} does not accept votes")
        self.item_id = item_id


class InvalidVoteKind(VotingError):
    """The vote direction is neither ``upvote`` nor ``downvote``."""

    kind = "validation_error"

    def __init__(self, vote_kind: object) -> None:
        super().__init__(f"Unsupported vote type: {vote_kind!r}")
        self.vote_kind = vote_kind


class VotesNotFound(VotingError):
    """No vote counters were ever initialized for the item."""

    kind = "not_found"

    def __init__(self, item_id: int | str) -> None:
        super().__init__(f"Vote data not found for item {item_id}")
        self.item_id = item_id


class PersistenceError(VotingError):
    """The persistent store failed to read or write vote counters."""

    kind = "persistence_error"


__all__ = [
    "InvalidTarget",
    "InvalidVoteKind",
    "PersistenceError",
    "VotesNotFound",
    "VotingError",
]
