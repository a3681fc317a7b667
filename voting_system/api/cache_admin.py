"""Administrative endpoints for the vote cache tier."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from voting_system.schemas.votes import CacheStats
from voting_system.services.dependencies import get_voting_system
from voting_system.services.voting_system import VotingSystem

router = APIRouter()


@router.get("/stats", response_model=CacheStats)
async def cache_stats(
    voting: VotingSystem = Depends(get_voting_system),
) -> CacheStats:
    return await voting.cache_stats()


@router.post("/flush")
async def flush_cache(
    voting: VotingSystem = Depends(get_voting_system),
) -> dict[str, bool]:
    """Drop every cached vote aggregate and listing snapshot."""

    return {"flushed": await voting.flush_cache()}
