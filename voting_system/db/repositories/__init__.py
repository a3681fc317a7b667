"""Repository implementations backing the voting core.

``SqlAlchemyVoteStore`` owns the authoritative counters while
``SqlAlchemyItemCatalog`` answers eligibility and enumeration questions on
behalf of the host platform.
"""

from voting_system.db.repositories.item_repository import (
    ItemCatalog,
    SqlAlchemyItemCatalog,
)
from voting_system.db.repositories.vote_repository import (
    SqlAlchemyVoteStore,
    VoteStore,
)

__all__ = [
    "ItemCatalog",
    "SqlAlchemyItemCatalog",
    "SqlAlchemyVoteStore",
    "VoteStore",
]
