"""Graph Schemas — Pydantic models for knowledge graph query responses.

Invariants:
    - ClaimRelationships keeps the {claim, related_claims, counter_claims, debates}
      shape consumed by the network visualization
    - ClaimStatsView percentages are integers (0–100)
    - A relationship target is None when the referenced claim cannot be resolved

Design Decisions:
    - Separate from claim schemas: these are read models for dashboards and the
      graph renderer, claim schemas are mutation contracts
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from claimgraph.core.domain_types import RelationshipType, Topic
from claimgraph.schemas.claim import ClaimStatsBlock, UsageRecord


class ClaimSummary(BaseModel):
    """A claim node with its raw counters."""
    id: UUID
    text: str
    topic: Topic
    stats: ClaimStatsBlock
    first_debate_id: str
    created_at: datetime


class ScoredClaimSummary(ClaimSummary):
    score: float


class ClaimList(BaseModel):
    claims: list[ClaimSummary] = []


class SearchResults(BaseModel):
    results: list[ScoredClaimSummary] = []


class TopicClaims(BaseModel):
    topic: Topic
    count: int
    claims: list[ClaimSummary] = []


class RoundedStats(BaseModel):
    """Stats with success_rate as a percentage and a rounded average score."""
    total_uses: int
    times_refuted: int
    wins_with_claim: int
    losses_with_claim: int
    success_rate: int
    avg_quality_score: int


class RelatedClaimSummary(BaseModel):
    text: str
    relationship: RelationshipType
    similarity: int
    uses: int


class CounterClaimSummary(BaseModel):
    text: str
    effectiveness: int
    uses: int


class ClaimStatsView(BaseModel):
    """Lookup result for a single claim text."""
    id: UUID
    original_text: str
    topic: Topic
    stats: RoundedStats
    related_claims: list[RelatedClaimSummary] = []
    counter_claims: list[CounterClaimSummary] = []


class RelatedClaimEdge(BaseModel):
    claim: ClaimSummary | None
    relationship: RelationshipType
    similarity: float | None = None


class CounterClaimEdge(BaseModel):
    claim: ClaimSummary | None
    effectiveness: int


class ClaimRelationships(BaseModel):
    """Claim neighbourhood for network rendering."""
    claim: ClaimSummary
    related_claims: list[RelatedClaimEdge] = []
    counter_claims: list[CounterClaimEdge] = []
    debates: list[UsageRecord] = []


class TopicCount(BaseModel):
    topic: Topic
    count: int


class GraphStats(BaseModel):
    """Aggregate graph statistics.

    total_relationships is the raw related-edge row count: each mirrored
    similar edge counts twice. Counter edges are in total_counter_claims.
    """
    total_claims: int = 0
    total_relationships: int = 0
    total_counter_claims: int = 0
    topic_distribution: list[TopicCount] = []
    avg_claims_per_debate: float = 0.0
