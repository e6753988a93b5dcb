"""Knowledge Graph Routes — HTTP contract of the claim event and query endpoints.

Invariants:
    - POST /claims -> 201; invalid payload -> 400 with VALIDATION_ERROR envelope
    - Unknown claim on stats / relationships / outcome -> 404
    - Refutation of an unknown claim -> 200 with original_found=false
"""

from uuid import uuid4

BASE = "/api/v1/knowledge-graph"

CARBON = "Carbon taxes reduce pollution"
CARBON_STRONG = "Carbon taxes reduce pollution significantly"


async def _add(client, text, debate_id="d1", turn_id="t1", side="for", quality_score=5):
    res = await client.post(f"{BASE}/claims", json={
        "claim_text": text,
        "debate_id": debate_id,
        "turn_id": turn_id,
        "side": side,
        "quality_score": quality_score,
    })
    assert res.status_code == 201, res.text
    return res.json()


# ─── Mutations ───────────────────────────────────────────────────


async def test_add_claim_returns_201(client):
    body = await _add(client, "Climate change is real", quality_score=8)
    assert body["normalized_text"] == "climat chang is real"
    assert body["topic"] == "environment"
    assert body["stats"]["total_uses"] == 1
    assert body["stats"]["avg_quality_score"] == 8.0


async def test_add_claim_repeat_returns_same_claim(client):
    first = await _add(client, "Climate change is real", quality_score=8)
    second = await _add(
        client, "climate change is real!", debate_id="d2", side="against", quality_score=6,
    )
    assert second["id"] == first["id"]
    assert second["stats"]["total_uses"] == 2
    assert second["stats"]["avg_quality_score"] == 7.0


async def test_add_claim_blank_text_returns_400(client):
    res = await client.post(f"{BASE}/claims", json={
        "claim_text": "   ", "debate_id": "d1", "turn_id": "t1", "side": "for",
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_add_claim_bad_side_returns_400(client):
    res = await client.post(f"{BASE}/claims", json={
        "claim_text": CARBON, "debate_id": "d1", "turn_id": "t1", "side": "neutral",
    })
    assert res.status_code == 400


async def test_add_claim_punctuation_only_returns_400(client):
    res = await client.post(f"{BASE}/claims", json={
        "claim_text": "?!", "debate_id": "d1", "turn_id": "t1", "side": "for",
    })
    assert res.status_code == 400
    assert res.json()["error"]["category"] == "validation"


async def test_refutation_of_unknown_claim_is_not_an_error(client):
    res = await client.post(f"{BASE}/claims/refutations", json={
        "original_text": "Never said", "refuting_text": "Also never said",
    })
    assert res.status_code == 200
    assert res.json() == {"original_found": False, "claim": None}


async def test_refutation_counts(client):
    await _add(client, CARBON)
    res = await client.post(f"{BASE}/claims/refutations", json={
        "original_text": CARBON, "refuting_text": "Something else", "effectiveness": 3,
    })
    assert res.status_code == 200
    assert res.json()["original_found"] is True
    assert res.json()["claim"]["stats"]["times_refuted"] == 1


async def test_refutation_effectiveness_out_of_range(client):
    res = await client.post(f"{BASE}/claims/refutations", json={
        "original_text": CARBON, "refuting_text": "x", "effectiveness": 11,
    })
    assert res.status_code == 400


async def test_record_outcome(client):
    claim = await _add(client, CARBON)
    for won in (True, True, False):
        res = await client.post(
            f"{BASE}/claims/{claim['id']}/outcome", json={"won": won},
        )
        assert res.status_code == 200
    stats = res.json()["stats"]
    assert (stats["wins_with_claim"], stats["losses_with_claim"]) == (2, 1)
    assert abs(stats["success_rate"] - 2 / 3) < 1e-9


async def test_record_outcome_unknown_claim_404(client):
    res = await client.post(
        f"{BASE}/claims/{uuid4()}/outcome", json={"won": True},
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_record_debate_outcome(client):
    await _add(client, CARBON, debate_id="debate-7", side="for")
    await _add(client, "Schools need more funding", debate_id="debate-7", side="against")
    res = await client.post(
        f"{BASE}/debates/debate-7/outcome", json={"winning_side": "against"},
    )
    assert res.status_code == 200
    assert res.json() == {"debate_id": "debate-7", "outcomes_recorded": 2}


# ─── Queries ─────────────────────────────────────────────────────


async def test_claim_stats_found(client):
    await _add(client, CARBON, quality_score=6)
    await _add(client, CARBON_STRONG, debate_id="d2")
    res = await client.post(f"{BASE}/claims/stats", json={"claim_text": CARBON})
    assert res.status_code == 200
    body = res.json()
    assert body["stats"]["avg_quality_score"] == 6
    assert body["stats"]["success_rate"] == 0
    assert body["related_claims"] == [{
        "text": CARBON_STRONG, "relationship": "similar", "similarity": 80, "uses": 1,
    }]


async def test_claim_stats_not_found_404(client):
    res = await client.post(f"{BASE}/claims/stats", json={"claim_text": "Unheard of"})
    assert res.status_code == 404


async def test_popular_and_successful_lists(client):
    await _add(client, CARBON)
    await _add(client, CARBON, debate_id="d2")
    await _add(client, "Schools need more funding")

    popular = await client.get(f"{BASE}/claims/popular", params={"limit": 5})
    assert popular.status_code == 200
    assert [c["text"] for c in popular.json()["claims"]] == [
        CARBON, "Schools need more funding",
    ]

    filtered = await client.get(
        f"{BASE}/claims/successful", params={"topic": "education"},
    )
    assert [c["topic"] for c in filtered.json()["claims"]] == ["education"]


async def test_popular_rejects_unknown_topic(client):
    res = await client.get(f"{BASE}/claims/popular", params={"topic": "sports"})
    assert res.status_code == 400


async def test_search_requires_query(client):
    res = await client.get(f"{BASE}/claims/search")
    assert res.status_code == 400


async def test_search_returns_scored_results(client):
    await _add(client, CARBON)
    res = await client.get(f"{BASE}/claims/search", params={"query": "pollution"})
    assert res.status_code == 200
    results = res.json()["results"]
    assert [r["text"] for r in results] == [CARBON]
    assert results[0]["score"] == 1.0


async def test_claims_by_topic(client):
    await _add(client, CARBON)
    res = await client.get(
        f"{BASE}/claims/topic/economy", params={"sort": "recent", "limit": 5},
    )
    assert res.status_code == 200
    assert res.json()["topic"] == "economy"
    assert res.json()["count"] == 1


async def test_claims_by_topic_invalid_topic_400(client):
    res = await client.get(f"{BASE}/claims/topic/sports")
    assert res.status_code == 400


async def test_claim_relationships(client):
    claim = await _add(client, CARBON)
    similar = await _add(client, CARBON_STRONG, debate_id="d2")

    res = await client.get(f"{BASE}/claims/{claim['id']}/relationships")

    assert res.status_code == 200
    body = res.json()
    assert set(body) == {"claim", "related_claims", "counter_claims", "debates"}
    assert body["claim"]["id"] == claim["id"]
    assert body["related_claims"][0]["claim"]["id"] == similar["id"]
    assert body["debates"][0]["debate_id"] == "d1"


async def test_claim_relationships_unknown_404(client):
    res = await client.get(f"{BASE}/claims/{uuid4()}/relationships")
    assert res.status_code == 404


async def test_graph_stats(client):
    await _add(client, CARBON)
    await _add(client, CARBON_STRONG, debate_id="d2")
    res = await client.get(f"{BASE}/stats")
    assert res.status_code == 200
    body = res.json()
    assert body["total_claims"] == 2
    assert body["total_relationships"] == 2
    assert body["topic_distribution"] == [{"topic": "economy", "count": 2}]
    assert body["avg_claims_per_debate"] == 1.0


# ─── Health ──────────────────────────────────────────────────────


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"
