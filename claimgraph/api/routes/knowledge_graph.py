"""Knowledge Graph Routes — read-only analytics over the claim graph.

Invariants:
    - POST /claims/stats -> 404 when the claim is not in the graph
    - GET /claims/{id}/relationships -> 404 for an unknown id
    - Dashboard endpoints return empty data (200) when the store is unavailable

Design Decisions:
    - /claims/stats is a POST: claim text is arbitrary-length free text
    - Query params validated by FastAPI (Topic/ClaimSort enums, limit bounds)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from claimgraph.api.dependencies import get_query_service
from claimgraph.core.domain_types import (
    ClaimId, ClaimSort, Topic, MAX_QUERY_LIMIT,
)
from claimgraph.core.errors import ClaimNotFoundError
from claimgraph.schemas.claim import ClaimStatsRequest
from claimgraph.schemas.graph import (
    ClaimList, ClaimRelationships, ClaimStatsView, GraphStats,
    SearchResults, TopicClaims,
)
from claimgraph.services.claim_queries import ClaimQueryService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/knowledge-graph", tags=["knowledge-graph"])


@router.post("/claims/stats", response_model=ClaimStatsView)
async def get_claim_stats(
    body: ClaimStatsRequest,
    service: ClaimQueryService = Depends(get_query_service),
):
    """Statistics for one claim text."""
    stats = await service.get_claim_stats(body.claim_text)
    if stats is None:
        raise ClaimNotFoundError(body.claim_text[:80])
    return stats


@router.get("/claims/popular", response_model=ClaimList)
async def get_popular_claims(
    topic: Topic | None = None,
    limit: int = Query(10, ge=1, le=MAX_QUERY_LIMIT),
    service: ClaimQueryService = Depends(get_query_service),
):
    return ClaimList(claims=await service.get_popular_claims(topic, limit))


@router.get("/claims/successful", response_model=ClaimList)
async def get_most_successful(
    topic: Topic | None = None,
    limit: int = Query(10, ge=1, le=MAX_QUERY_LIMIT),
    service: ClaimQueryService = Depends(get_query_service),
):
    return ClaimList(claims=await service.get_most_successful(topic, limit))


@router.get("/claims/search", response_model=SearchResults)
async def search_claims(
    query: str = Query(..., min_length=1, max_length=1_000),
    limit: int = Query(10, ge=1, le=MAX_QUERY_LIMIT),
    service: ClaimQueryService = Depends(get_query_service),
):
    """Full-text search over normalized claim text."""
    return SearchResults(results=await service.search_claims(query, limit))


@router.get("/claims/topic/{topic}", response_model=TopicClaims)
async def get_claims_by_topic(
    topic: Topic,
    limit: int = Query(20, ge=1, le=MAX_QUERY_LIMIT),
    sort: ClaimSort = ClaimSort.NONE,
    service: ClaimQueryService = Depends(get_query_service),
):
    return await service.get_claims_by_topic(topic, limit, sort)


@router.get(
    "/claims/{claim_id}/relationships", response_model=ClaimRelationships,
)
async def get_claim_relationships(
    claim_id: UUID,
    service: ClaimQueryService = Depends(get_query_service),
):
    """Claim neighbourhood for the network visualization."""
    return await service.get_claim_relationships(ClaimId(claim_id))


@router.get("/stats", response_model=GraphStats)
async def get_graph_stats(
    service: ClaimQueryService = Depends(get_query_service),
):
    return await service.get_graph_stats()
