"""Tests for the sorted vote listing and its snapshot cache."""

from __future__ import annotations

import pytest

from tests.voting_system.support.in_memory import (
    InMemoryItemCatalog,
    InMemoryRedis,
    InMemoryVoteStore,
)
from voting_system.schemas.votes import ItemVotes, SortDirection, SortField, VoteKind
from voting_system.services.listing_service import (
    VoteListingService,
    natural_sort_key,
    normalize_direction,
    normalize_order_by,
    sort_rows,
    summarize,
)
from voting_system.services.vote_service import VoteService
from voting_system.services.voting_system import VotingSystem


async def _seed(
    catalog: InMemoryItemCatalog,
    votes: VoteService,
    rows: list[tuple[str, str, int, int]],
) -> None:
    for item_id, title, upvotes, downvotes in rows:
        catalog.add(item_id, title)
        await votes.initialize(item_id)
        for _ in range(upvotes):
            await votes.cast_vote(item_id, VoteKind.UPVOTE)
        for _ in range(downvotes):
            await votes.cast_vote(item_id, VoteKind.DOWNVOTE)


def _ids(rows: list[ItemVotes]) -> list[str]:
    return [str(row.item_id) for row in rows]


@pytest.mark.asyncio
async def test_listing_by_score_descending(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(
        catalog,
        vote_service,
        [("a", "A", 5, 1), ("b", "B", 2, 2), ("c", "C", 5, 0)],
    )

    rows = await listing_service.list("score", "desc")

    assert _ids(rows) == ["c", "a", "b"]
    assert [row.score for row in rows] == [5, 4, 0]


@pytest.mark.asyncio
async def test_unknown_order_falls_back_to_title(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(
        catalog,
        vote_service,
        [("2", "Zebra", 4, 0), ("1", "apple", 0, 2), ("3", "Mango", 1, 1)],
    )

    bogus = await listing_service.list("bogus", "asc")
    by_title = await listing_service.list("title", "asc")

    assert _ids(bogus) == _ids(by_title) == ["1", "3", "2"]


@pytest.mark.asyncio
async def test_unknown_direction_falls_back_to_ascending(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(catalog, vote_service, [("x", "X", 2, 0), ("y", "Y", 1, 0)])

    rows = await listing_service.list("upvotes", "sideways")

    assert _ids(rows) == ["y", "x"]


@pytest.mark.asyncio
async def test_titles_sort_naturally(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(
        catalog,
        vote_service,
        [("10", "Item 10", 0, 0), ("2", "item 2", 0, 0), ("1", "Item 1", 0, 0)],
    )

    rows = await listing_service.list(SortField.TITLE, SortDirection.ASC)

    assert [row.title for row in rows] == ["Item 1", "item 2", "Item 10"]


@pytest.mark.asyncio
async def test_ties_keep_enumeration_order_in_both_directions(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(
        catalog,
        vote_service,
        [("p", "P", 1, 0), ("q", "Q", 2, 0), ("r", "R", 1, 0)],
    )

    ascending = await listing_service.list("upvotes", "asc")
    descending = await listing_service.list("upvotes", "desc")

    assert _ids(ascending) == ["p", "r", "q"]
    assert _ids(descending) == ["q", "p", "r"]


@pytest.mark.asyncio
async def test_items_without_counters_are_listed_as_zero(
    listing_service: VoteListingService, catalog: InMemoryItemCatalog
) -> None:
    catalog.add(7, "Fresh post")

    rows = await listing_service.list()

    assert rows == [
        ItemVotes(item_id=7, title="Fresh post", upvotes=0, downvotes=0, total=0, score=0)
    ]


@pytest.mark.asyncio
async def test_ineligible_items_are_excluded(
    listing_service: VoteListingService, catalog: InMemoryItemCatalog
) -> None:
    catalog.add(1, "Published")
    catalog.add(2, "Draft", eligible=False)

    rows = await listing_service.list()

    assert _ids(rows) == ["1"]


@pytest.mark.asyncio
async def test_snapshot_reused_while_catalog_unchanged(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
    store: InMemoryVoteStore,
    fake_redis: InMemoryRedis,
) -> None:
    await _seed(catalog, vote_service, [("a", "A", 1, 0), ("b", "B", 0, 0)])

    first = await listing_service.list("total", "desc")
    assert "test_votes:votes:collection:total:desc" in fake_redis._store
    reads = store.reads
    again = await listing_service.list("total", "desc")
    assert again == first
    assert store.reads == reads

    await vote_service.cast_vote("b", VoteKind.UPVOTE)
    await vote_service.cast_vote("b", VoteKind.UPVOTE)

    refreshed = await listing_service.list("total", "desc")
    assert _ids(refreshed) == ["b", "a"]


@pytest.mark.asyncio
async def test_unpublished_item_leaves_next_listing(
    voting: VotingSystem, catalog: InMemoryItemCatalog
) -> None:
    catalog.add("1", "Alpha")
    catalog.add("2", "Beta")
    await voting.activate()
    before = await voting.list_items_with_votes("title", "asc")
    assert _ids(before.items) == ["1", "2"]

    catalog.items[1].eligible = False

    after = await voting.list_items_with_votes("title", "asc")
    assert _ids(after.items) == ["1"]
    assert after.summary.total_items == 1


@pytest.mark.asyncio
async def test_renamed_item_shows_new_title(
    listing_service: VoteListingService, catalog: InMemoryItemCatalog
) -> None:
    catalog.add("1", "Draft title")
    await listing_service.list()

    catalog.items[0].title = "Final title"

    rows = await listing_service.list()
    assert [row.title for row in rows] == ["Final title"]


@pytest.mark.asyncio
async def test_republished_item_returns_with_existing_counters(
    voting: VotingSystem, catalog: InMemoryItemCatalog
) -> None:
    catalog.add("1", "Kept")
    catalog.add("2", "Republished")
    await voting.activate()
    await voting.submit_vote("2", VoteKind.UPVOTE)
    catalog.items[1].eligible = False
    assert _ids((await voting.list_items_with_votes("upvotes", "desc")).items) == ["1"]

    catalog.items[1].eligible = True
    assert await voting.on_item_published("2") is True

    rows = (await voting.list_items_with_votes("upvotes", "desc")).items
    assert _ids(rows) == ["2", "1"]
    assert rows[0].upvotes == 1


@pytest.mark.asyncio
async def test_listing_works_with_cache_offline(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
    fake_redis: InMemoryRedis,
) -> None:
    await _seed(catalog, vote_service, [("a", "A", 0, 1), ("b", "B", 1, 0)])
    fake_redis.offline = True

    rows = await listing_service.list("score", "desc")

    assert _ids(rows) == ["b", "a"]


@pytest.mark.asyncio
async def test_listing_reports_effective_order_and_summary(
    listing_service: VoteListingService,
    catalog: InMemoryItemCatalog,
    vote_service: VoteService,
) -> None:
    await _seed(catalog, vote_service, [("a", "A", 3, 1), ("c", "C", 5, 0)])

    listing = await listing_service.listing("post_title", "DESCENDING")

    assert listing.order_by is SortField.TITLE
    assert listing.direction is SortDirection.DESC
    assert _ids(listing.items) == ["c", "a"]
    assert listing.summary.model_dump() == {
        "total_items": 2,
        "total_upvotes": 8,
        "total_downvotes": 1,
        "total_votes": 9,
    }


def test_natural_sort_key_compares_numbers_numerically() -> None:
    titles = ["file20", "File3", "file100", "file3b"]

    assert sorted(titles, key=natural_sort_key) == ["File3", "file3b", "file20", "file100"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("score", SortField.SCORE),
        (" Upvotes ", SortField.UPVOTES),
        ("total_votes", SortField.TOTAL),
        ("post_title", SortField.TITLE),
        ("nonsense", SortField.TITLE),
        (None, SortField.TITLE),
    ],
)
def test_normalize_order_by(raw: str | None, expected: SortField) -> None:
    assert normalize_order_by(raw) is expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("desc", SortDirection.DESC),
        ("Descending", SortDirection.DESC),
        ("ascending", SortDirection.ASC),
        ("", SortDirection.ASC),
        (None, SortDirection.ASC),
    ],
)
def test_normalize_direction(raw: str | None, expected: SortDirection) -> None:
    assert normalize_direction(raw) is expected


def test_sort_rows_and_summary_on_empty_input() -> None:
    assert sort_rows([], SortField.SCORE, SortDirection.DESC) == []
    assert summarize([]).total_items == 0
