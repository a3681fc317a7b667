"""Pydantic schemas for API requests and responses."""

from voting_system.schemas.error import (  # noqa: F401
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from voting_system.schemas.votes import (  # noqa: F401
    CacheStats,
    ItemVotes,
    SortDirection,
    SortField,
    VoteAggregate,
    VoteKind,
    VoteListing,
    VoteResult,
    VoteSubmission,
    VoteSummary,
)
