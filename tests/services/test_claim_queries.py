"""Claim Query Service — ranking, search and statistics over a seeded SQLite graph.

Invariants:
    - get_claim_stats returns None for an unknown claim and propagates store errors
    - Dashboard queries return empty results when the store fails
    - total_relationships counts both rows of a mirrored similar edge
"""

import asyncio

import pytest
from uuid import uuid4

from claimgraph.core.domain_types import ClaimSort, Topic
from claimgraph.core.errors import (
    ClaimNotFoundError, ClaimValidationError, DatabaseError,
)

CARBON = "Carbon taxes reduce pollution"
CARBON_STRONG = "Carbon taxes reduce pollution significantly"
CARBON_POOR = "Carbon taxes hurt the poor"
SCHOOLS = "Schools need more funding"
TAX_LOW = "Tax rates are historically low"


def _texts(claims: list[dict]) -> list[str]:
    return [c["text"] for c in claims]


async def _fail(*args, **kwargs):
    raise DatabaseError("connection refused", "query")


# ─── get_claim_stats ─────────────────────────────────────────────


async def test_claim_stats_unknown_claim_is_none(queries):
    assert await queries.get_claim_stats("Nobody ever said this") is None


async def test_claim_stats_lists_related_and_counter_claims(graph, queries):
    await graph.add_claim(CARBON, "d1", "t1", "for", 7)
    await graph.add_claim(CARBON_STRONG, "d2", "t1", "for", 5)
    await graph.add_claim(CARBON_POOR, "d2", "t2", "against", 5)
    await graph.mark_refuted(CARBON, CARBON_POOR, 6)
    claim = await graph.add_claim(CARBON, "d3", "t1", "for", 8)
    await graph.record_outcome(claim.id, True)

    stats = await queries.get_claim_stats("carbon taxes reduce pollution.")

    assert stats["original_text"] == CARBON
    assert stats["topic"] == "economy"
    assert stats["stats"] == {
        "total_uses": 2,
        "times_refuted": 1,
        "wins_with_claim": 1,
        "losses_with_claim": 0,
        "success_rate": 100,
        "avg_quality_score": 8,  # 7.5 rounds up
    }
    assert stats["related_claims"] == [{
        "text": CARBON_STRONG, "relationship": "similar",
        "similarity": 80, "uses": 1,
    }]
    assert stats["counter_claims"] == [{
        "text": CARBON_POOR, "effectiveness": 6, "uses": 1,
    }]


async def test_claim_stats_rejects_empty_text(queries):
    with pytest.raises(ClaimValidationError):
        await queries.get_claim_stats("  ")


async def test_claim_stats_propagates_store_errors(queries, store, monkeypatch):
    monkeypatch.setattr(store, "get_by_normalized_text", _fail)
    with pytest.raises(DatabaseError):
        await queries.get_claim_stats(CARBON)


# ─── popular / successful ────────────────────────────────────────


async def test_popular_claims_ordered_by_uses(graph, queries):
    for debate in ("d1", "d2", "d3"):
        await graph.add_claim(TAX_LOW, debate, "t1", "for")
    await graph.add_claim(SCHOOLS, "d1", "t2", "against")
    for debate in ("d1", "d2"):
        await graph.add_claim("Doctors are overworked", debate, "t3", "for")

    popular = await queries.get_popular_claims()

    assert _texts(popular) == [TAX_LOW, "Doctors are overworked", SCHOOLS]
    assert popular[0]["stats"]["total_uses"] == 3


async def test_popular_claims_topic_filter_and_limit(graph, queries):
    await graph.add_claim(TAX_LOW, "d1", "t1", "for")
    await graph.add_claim(SCHOOLS, "d1", "t2", "against")
    await graph.add_claim("Doctors are overworked", "d1", "t3", "for")

    assert _texts(await queries.get_popular_claims(Topic.ECONOMY)) == [TAX_LOW]
    assert len(await queries.get_popular_claims(limit=2)) == 2
    assert len(await queries.get_popular_claims(limit=0)) == 1


async def test_most_successful_breaks_ties_by_uses(graph, queries):
    once = await graph.add_claim(SCHOOLS, "d1", "t1", "for")
    await graph.add_claim(TAX_LOW, "d1", "t2", "for")
    twice = await graph.add_claim(TAX_LOW, "d2", "t1", "for")
    loser = await graph.add_claim("Doctors are overworked", "d1", "t3", "against")
    await graph.record_outcome(once.id, True)
    await graph.record_outcome(twice.id, True)
    await graph.record_outcome(loser.id, False)

    ranked = await queries.get_most_successful()

    assert _texts(ranked) == [TAX_LOW, SCHOOLS, "Doctors are overworked"]
    assert ranked[0]["stats"]["success_rate"] == 1.0
    assert ranked[-1]["stats"]["success_rate"] == 0.0


async def test_dashboard_queries_fail_soft(queries, store, monkeypatch):
    monkeypatch.setattr(store, "list_claims", _fail)
    assert await queries.get_popular_claims() == []
    assert await queries.get_most_successful() == []
    by_topic = await queries.get_claims_by_topic(Topic.ECONOMY)
    assert by_topic == {"topic": "economy", "count": 0, "claims": []}


async def _drop_connection(*args, **kwargs):
    raise ConnectionResetError("connection reset by peer")


async def _time_out(*args, **kwargs):
    raise asyncio.TimeoutError()


async def test_dashboard_queries_fail_soft_on_driver_errors(queries, store, monkeypatch):
    monkeypatch.setattr(store, "list_claims", _drop_connection)
    monkeypatch.setattr(store, "search", _time_out)
    monkeypatch.setattr(store, "count_claims", _time_out)

    assert await queries.get_popular_claims() == []
    assert await queries.get_most_successful() == []
    assert (await queries.get_claims_by_topic(Topic.HEALTH))["claims"] == []
    assert await queries.search_claims("carbon") == []
    stats = await queries.get_graph_stats()
    assert stats["total_claims"] == 0
    assert stats["avg_claims_per_debate"] == 0.0


# ─── search ──────────────────────────────────────────────────────


async def test_search_ranks_by_token_overlap(graph, queries):
    await graph.add_claim(TAX_LOW, "d1", "t1", "for")
    await graph.add_claim(CARBON, "d1", "t2", "for")
    await graph.add_claim(SCHOOLS, "d1", "t3", "for")

    results = await queries.search_claims("Carbon TAX")

    assert _texts(results) == [CARBON, TAX_LOW]
    assert results[0]["score"] == pytest.approx(1.0)
    assert results[1]["score"] == pytest.approx(0.5)


async def test_search_matches_inflected_query(graph, queries):
    await graph.add_claim(SCHOOLS, "d1", "t1", "for")
    assert _texts(await queries.search_claims("school")) == [SCHOOLS]


async def test_search_without_tokens_is_empty(graph, queries):
    await graph.add_claim(CARBON, "d1", "t1", "for")
    assert await queries.search_claims("?!") == []


async def test_search_rejects_blank_query(queries):
    with pytest.raises(ClaimValidationError):
        await queries.search_claims("")


async def test_search_fails_soft(queries, store, monkeypatch):
    monkeypatch.setattr(store, "search", _fail)
    assert await queries.search_claims("carbon") == []


# ─── by topic ────────────────────────────────────────────────────


async def test_claims_by_topic_sorted(graph, queries):
    await graph.add_claim(CARBON, "d1", "t1", "for")
    await graph.add_claim(TAX_LOW, "d1", "t2", "for")
    await graph.add_claim(TAX_LOW, "d2", "t2", "for")
    await graph.add_claim(SCHOOLS, "d1", "t3", "for")

    oldest_first = await queries.get_claims_by_topic(Topic.ECONOMY)
    assert oldest_first["topic"] == "economy"
    assert oldest_first["count"] == 2
    assert _texts(oldest_first["claims"]) == [CARBON, TAX_LOW]

    newest_first = await queries.get_claims_by_topic("economy", sort=ClaimSort.RECENT)
    assert _texts(newest_first["claims"]) == [TAX_LOW, CARBON]

    popular = await queries.get_claims_by_topic("economy", limit=1, sort="popular")
    assert _texts(popular["claims"]) == [TAX_LOW]


async def test_claims_by_unknown_topic_rejected(queries):
    with pytest.raises(ClaimValidationError):
        await queries.get_claims_by_topic("sports")


async def test_claims_by_topic_unknown_sort_names_sort_field(queries):
    with pytest.raises(ClaimValidationError) as exc_info:
        await queries.get_claims_by_topic(Topic.ECONOMY, sort="alphabetical")
    assert exc_info.value.field == "sort"


async def test_claims_by_unknown_topic_names_topic_field(queries):
    with pytest.raises(ClaimValidationError) as exc_info:
        await queries.get_claims_by_topic("sports", sort="alphabetical")
    assert exc_info.value.field == "topic"


# ─── graph stats ─────────────────────────────────────────────────


async def test_graph_stats(graph, queries):
    await graph.add_claim(CARBON, "d1", "t1", "for")
    await graph.add_claim(CARBON_STRONG, "d2", "t1", "for")
    await graph.add_claim(SCHOOLS, "d2", "t2", "against")
    await graph.add_claim(SCHOOLS, "d2", "t4", "against")
    await graph.mark_refuted(CARBON, SCHOOLS)

    stats = await queries.get_graph_stats()

    assert stats["total_claims"] == 3
    assert stats["total_relationships"] == 2
    assert stats["total_counter_claims"] == 1
    assert stats["topic_distribution"] == [
        {"topic": "economy", "count": 2},
        {"topic": "education", "count": 1},
    ]
    # d1: {carbon}, d2: {carbon strong, schools}
    assert stats["avg_claims_per_debate"] == pytest.approx(1.5)


async def test_graph_stats_empty_graph(queries):
    stats = await queries.get_graph_stats()
    assert stats == {
        "total_claims": 0,
        "total_relationships": 0,
        "total_counter_claims": 0,
        "topic_distribution": [],
        "avg_claims_per_debate": 0.0,
    }


async def test_graph_stats_fail_soft(queries, store, monkeypatch):
    monkeypatch.setattr(store, "count_claims", _fail)
    stats = await queries.get_graph_stats()
    assert stats["total_claims"] == 0
    assert stats["topic_distribution"] == []


# ─── relationships ───────────────────────────────────────────────


async def test_claim_relationships_view(graph, queries):
    claim = await graph.add_claim(CARBON, "d1", "t1", "for")
    similar = await graph.add_claim(CARBON_STRONG, "d2", "t1", "for")
    refuter = await graph.add_claim(CARBON_POOR, "d2", "t2", "against")
    await graph.mark_refuted(CARBON, CARBON_POOR, 8)

    view = await queries.get_claim_relationships(claim.id)

    assert view["claim"]["id"] == claim.id
    assert view["claim"]["text"] == CARBON
    assert [e["claim"]["id"] for e in view["related_claims"]] == [similar.id]
    assert view["related_claims"][0]["relationship"] == "similar"
    assert view["related_claims"][0]["similarity"] == pytest.approx(0.8)
    assert [e["claim"]["id"] for e in view["counter_claims"]] == [refuter.id]
    assert view["counter_claims"][0]["effectiveness"] == 8
    assert [(d["debate_id"], d["turn_id"], d["side"]) for d in view["debates"]] == [
        ("d1", "t1", "for"),
    ]


async def test_claim_relationships_unknown_id(queries):
    with pytest.raises(ClaimNotFoundError):
        await queries.get_claim_relationships(uuid4())
