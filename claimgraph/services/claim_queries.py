"""Claim Query Service — read-only ranking, search and statistics over the claim graph.

Invariants:
    - Never mutates the store
    - Dashboard queries (popular, successful, search, by-topic, graph stats) fail
      SOFT: any error is logged and an empty result returned
    - get_claim_stats returns None for "not in graph" and lets store errors propagate
    - get_claim_relationships raises ClaimNotFoundError for an unknown id
    - Limits clamped to 1..max_query_limit

Design Decisions:
    - Results are plain dicts shaped by core/claim_stats.py; routes wrap them in
      response schemas
    - Edge targets resolved in one batched lookup per view
"""

import logging
from typing import Awaitable, Callable, TypeVar

from claimgraph.config import Settings, get_settings
from claimgraph.core.claim_stats import (
    average_claims_per_debate, project_stats, raw_stats,
    summarize_counter, summarize_related,
)
from claimgraph.core.domain_types import ClaimId, ClaimSort, Topic
from claimgraph.core.errors import (
    ClaimNotFoundError, ClaimValidationError, ErrorContext,
    require_text,
)
from claimgraph.core.normalize_text import normalize_claim
from claimgraph.core.repository_protocols import ClaimLike, ClaimStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def claim_summary(claim: ClaimLike) -> dict:
    """Compact claim node used by list endpoints and relationship views."""
    return {
        "id": claim.id,
        "text": claim.original_text,
        "topic": claim.topic,
        "stats": raw_stats(claim),
        "first_debate_id": claim.first_debate_id,
        "created_at": claim.created_at,
    }


def _empty_graph_stats() -> dict:
    return {
        "total_claims": 0,
        "total_relationships": 0,
        "total_counter_claims": 0,
        "topic_distribution": [],
        "avg_claims_per_debate": 0.0,
    }


class ClaimQueryService:
    """Read side of the claim graph."""

    def __init__(self, store: ClaimStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    def _limit(self, limit: int | None, default: int) -> int:
        if limit is None:
            return default
        return max(1, min(int(limit), self.settings.max_query_limit))

    async def _soft(
        self, operation: str, call: Callable[[], Awaitable[T]], fallback: T,
    ) -> T:
        try:
            return await call()
        except Exception as e:
            logger.error(
                f"Claim query {operation} failed, returning empty result: {e}",
                extra={
                    "operation": operation,
                    "error_code": getattr(e, "code", type(e).__name__),
                },
                exc_info=True,
            )
            return fallback

    async def get_claim_stats(self, text: str) -> dict | None:
        """Stats view for an exact normalized match, or None if not in graph."""
        normalized = normalize_claim(require_text(text, "claim_text"))
        claim = await self.store.get_by_normalized_text(normalized)
        if claim is None:
            return None

        targets = await self.store.get_many(
            [r.target_claim_id for r in claim.related_claims]
            + [c.counter_claim_id for c in claim.counter_claims],
        )
        return {
            "id": claim.id,
            "original_text": claim.original_text,
            "topic": claim.topic,
            "stats": project_stats(claim),
            "related_claims": [
                summarize_related(r, targets[r.target_claim_id])
                for r in claim.related_claims
                if r.target_claim_id in targets
            ],
            "counter_claims": [
                summarize_counter(c, targets[c.counter_claim_id])
                for c in claim.counter_claims
                if c.counter_claim_id in targets
            ],
        }

    async def get_popular_claims(
        self, topic: Topic | None = None, limit: int | None = None,
    ) -> list[dict]:
        """Most-used claims first."""
        async def run():
            claims = await self.store.list_claims(
                topic, ClaimSort.POPULAR,
                self._limit(limit, self.settings.default_query_limit),
            )
            return [claim_summary(c) for c in claims]
        return await self._soft("get_popular_claims", run, [])

    async def get_most_successful(
        self, topic: Topic | None = None, limit: int | None = None,
    ) -> list[dict]:
        """Highest success rate first; ties go to the more-used claim."""
        async def run():
            claims = await self.store.list_claims(
                topic, ClaimSort.SUCCESSFUL,
                self._limit(limit, self.settings.default_query_limit),
            )
            return [claim_summary(c) for c in claims]
        return await self._soft("get_most_successful", run, [])

    async def search_claims(
        self, query: str, limit: int | None = None,
    ) -> list[dict]:
        """Full-text search over normalized text, most relevant first."""
        normalized = normalize_claim(require_text(query, "query"))

        async def run():
            hits = await self.store.search(
                normalized, self._limit(limit, self.settings.default_query_limit),
            )
            return [
                {**claim_summary(claim), "score": score}
                for claim, score in hits
            ]
        return await self._soft("search_claims", run, [])

    async def get_claims_by_topic(
        self,
        topic: Topic,
        limit: int | None = None,
        sort: ClaimSort = ClaimSort.NONE,
    ) -> dict:
        try:
            topic = Topic(topic)
        except ValueError as e:
            raise ClaimValidationError(str(e), "topic")
        try:
            sort = ClaimSort(sort)
        except ValueError as e:
            raise ClaimValidationError(str(e), "sort")

        async def run():
            claims = await self.store.list_claims(
                topic, sort,
                self._limit(limit, self.settings.topic_query_limit),
            )
            return [claim_summary(c) for c in claims]

        claims = await self._soft("get_claims_by_topic", run, [])
        return {"topic": topic.value, "count": len(claims), "claims": claims}

    async def get_graph_stats(self) -> dict:
        """Claim count, raw related-edge count, topic distribution.

        total_relationships counts every related-edge row, so a mirrored
        similar edge contributes 2. Counter edges are reported separately.
        """
        async def run():
            pairs, debates = await self.store.debate_usage_counts()
            return {
                "total_claims": await self.store.count_claims(),
                "total_relationships": await self.store.count_relations(),
                "total_counter_claims": await self.store.count_counter_claims(),
                "topic_distribution": [
                    {"topic": topic, "count": count}
                    for topic, count in await self.store.topic_distribution()
                ],
                "avg_claims_per_debate": average_claims_per_debate(pairs, debates),
            }
        return await self._soft("get_graph_stats", run, _empty_graph_stats())

    async def get_claim_relationships(self, claim_id: ClaimId) -> dict:
        """Claim with related/counter claims and usage records expanded."""
        claim = await self.store.get_by_id(claim_id)
        if claim is None:
            raise ClaimNotFoundError(
                str(claim_id), ErrorContext(claim_id=str(claim_id)),
            )

        targets = await self.store.get_many(
            [r.target_claim_id for r in claim.related_claims]
            + [c.counter_claim_id for c in claim.counter_claims],
        )

        def node(target_id):
            target = targets.get(target_id)
            return claim_summary(target) if target is not None else None

        return {
            "claim": claim_summary(claim),
            "related_claims": [
                {
                    "claim": node(r.target_claim_id),
                    "relationship": r.relationship,
                    "similarity": r.similarity,
                }
                for r in claim.related_claims
            ],
            "counter_claims": [
                {
                    "claim": node(c.counter_claim_id),
                    "effectiveness": c.effectiveness,
                }
                for c in claim.counter_claims
            ],
            "debates": [
                {
                    "debate_id": u.debate_id,
                    "turn_id": u.turn_id,
                    "side": u.side,
                    "used_at": u.used_at,
                }
                for u in claim.usages
            ],
        }
