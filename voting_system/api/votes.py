"""FastAPI router exposing vote submission, reads, and the reporting listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from voting_system.errors import InvalidTarget
from voting_system.schemas.votes import (
    VoteAggregate,
    VoteListing,
    VoteResult,
    VoteSubmission,
)
from voting_system.services.dependencies import get_voting_system
from voting_system.services.voting_system import VotingSystem
from voting_system.settings import get_settings

router = APIRouter()


@router.post("", response_model=VoteResult)
async def submit_vote(
    payload: VoteSubmission,
    voting: VotingSystem = Depends(get_voting_system),
) -> VoteResult:
    """Record an upvote or downvote and return the updated aggregate."""

    return await voting.submit_vote(payload.item_id, payload.vote_type)


@router.get("", response_model=VoteListing)
async def list_items_with_votes(
    response: Response,
    orderby: str = Query(
        "title",
        description="One of title, upvotes, downvotes, total, score; unknown values sort by title",
    ),
    order: str = Query("asc", description="asc or desc; unknown values sort ascending"),
    voting: VotingSystem = Depends(get_voting_system),
) -> VoteListing:
    """Return every eligible item with its votes, sorted as requested."""

    listing = await voting.list_items_with_votes(orderby, order)
    response.headers["Cache-Control"] = (
        f"public, max-age={get_settings().vote_cache_ttl_seconds}"
    )
    return listing


@router.get("/{item_id}", response_model=VoteAggregate)
async def fetch_votes(
    item_id: str,
    voting: VotingSystem = Depends(get_voting_system),
) -> VoteAggregate:
    """Return the aggregate for a single item."""

    return await voting.fetch_votes(item_id)


@router.post("/{item_id}/reset", response_model=VoteAggregate)
async def reset_votes(
    item_id: str,
    voting: VotingSystem = Depends(get_voting_system),
) -> VoteAggregate:
    """Administrative reset of an item's counters to zero."""

    return await voting.reset_votes(item_id)


@router.post("/{item_id}/initialize", status_code=status.HTTP_204_NO_CONTENT)
async def initialize_votes(
    item_id: str,
    voting: VotingSystem = Depends(get_voting_system),
) -> Response:
    """Publish hook: create zeroed counters for a newly eligible item."""

    if not await voting.on_item_published(item_id):
        raise InvalidTarget(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
