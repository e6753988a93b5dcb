"""Boundary Protocols — contracts between the graph engine and the claim store.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Every mutating method is a single atomic store write (or insert-if-absent)

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Store-level primitives carry concurrency correctness: unique
      normalized_text, ON CONFLICT DO NOTHING inserts, col = col + 1 updates
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from claimgraph.core.domain_types import ClaimId, ClaimSort, Topic
from claimgraph.core.similarity import SimilarMatch


class ClaimLike(Protocol):
    """Structural contract for Claim rows handed to services and projections."""
    id: UUID
    original_text: str
    normalized_text: str
    topic: str
    first_debate_id: str
    first_turn_id: str
    total_uses: int
    times_refuted: int
    wins_with_claim: int
    losses_with_claim: int
    avg_quality_score: float
    success_rate: float
    created_at: datetime
    updated_at: datetime
    usages: list
    related_claims: list
    counter_claims: list


class ClaimStore(Protocol):
    """Contract for claim persistence — implemented by shell."""

    # Lookups
    async def get_by_id(self, claim_id: ClaimId) -> ClaimLike | None: ...
    async def get_by_normalized_text(self, normalized: str) -> ClaimLike | None: ...
    async def get_many(self, claim_ids: list[UUID]) -> dict[UUID, ClaimLike]: ...

    # Mutations
    async def insert_if_absent(self, claim_data: dict, usage_data: dict) -> ClaimId | None: ...
    async def record_usage(
        self, claim_id: ClaimId, usage_data: dict, quality_score: float,
    ) -> None: ...
    async def add_relation_if_absent(
        self, source_id: ClaimId, target_id: ClaimId,
        relationship: str, similarity: float | None,
    ) -> bool: ...
    async def replace_relations(
        self, source_id: ClaimId, matches: list[SimilarMatch],
        relationship: str, stale_before: datetime,
    ) -> None: ...
    async def increment_refuted(self, claim_id: ClaimId) -> None: ...
    async def add_counter_claim_if_absent(
        self, claim_id: ClaimId, counter_id: ClaimId, effectiveness: int,
    ) -> bool: ...
    async def increment_outcome(self, claim_id: ClaimId, won: bool) -> bool: ...

    # Queries
    async def find_link_candidates(
        self, topic: str, exclude_id: ClaimId, limit: int,
    ) -> list[tuple[UUID, str]]: ...
    async def list_claims(
        self, topic: Topic | None, sort: ClaimSort, limit: int,
    ) -> list[ClaimLike]: ...
    async def search(self, normalized_query: str, limit: int) -> list[tuple[ClaimLike, float]]: ...
    async def get_usages_for_debate(self, debate_id: str) -> list: ...
    async def count_claims(self) -> int: ...
    async def count_relations(self) -> int: ...
    async def count_counter_claims(self) -> int: ...
    async def topic_distribution(self) -> list[tuple[str, int]]: ...
    async def debate_usage_counts(self) -> tuple[int, int]: ...
