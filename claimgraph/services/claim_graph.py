"""Claim Graph Service — add / link / refute / outcome update protocols.

Invariants:
    - Text is validated before normalization (ClaimValidationError on empty input)
    - One claim per normalized_text: creation is insert-if-absent; a lost race
      falls through to the usage-update path against the winning row
    - Linking runs only when a claim is created, never on repeat use
    - Store failures on mutations propagate as DatabaseError (no retry here)
    - Missing claims in mark_refuted are logged and skipped, never raised

Design Decisions:
    - Pure steps (normalize, classify, score) live in core/; this class only
      sequences store calls around them
    - Returns refreshed Claim rows so callers see post-update stats
"""

import logging
from datetime import datetime, timezone

from claimgraph.config import Settings, get_settings
from claimgraph.core.classify_topic import classify_topic
from claimgraph.core.domain_types import (
    ClaimId, RelationshipType, Side, MIN_EFFECTIVENESS, MAX_EFFECTIVENESS,
)
from claimgraph.core.errors import (
    ClaimNotFoundError, ClaimValidationError, ConcurrencyError, ErrorContext,
    require_text,
)
from claimgraph.core.normalize_text import normalize_claim
from claimgraph.core.repository_protocols import ClaimLike, ClaimStore
from claimgraph.core.similarity import SimilarMatch, select_similar

logger = logging.getLogger(__name__)


def _parse_side(side: Side | str) -> Side:
    try:
        return Side(side)
    except ValueError:
        raise ClaimValidationError(
            f"side must be one of: {', '.join(s.value for s in Side)}", "side",
        )


def _normalized_or_reject(text: str, field: str) -> str:
    normalized = normalize_claim(require_text(text, field))
    if not normalized:
        raise ClaimValidationError(f"{field} has no content after normalization", field)
    return normalized


class ClaimGraphService:
    """Owns every mutation of the claim graph."""

    def __init__(self, store: ClaimStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    async def add_claim(
        self,
        text: str,
        debate_id: str,
        turn_id: str,
        side: Side | str,
        quality_score: float = 0.0,
    ) -> ClaimLike:
        """Record one use of a claim, creating and linking it on first sight."""
        normalized = _normalized_or_reject(text, "claim_text")
        side = _parse_side(side)
        topic = classify_topic(text)
        usage = {
            "debate_id": str(debate_id),
            "turn_id": str(turn_id),
            "side": side.value,
        }

        existing = await self.store.get_by_normalized_text(normalized)
        if existing:
            return await self._add_usage(existing.id, usage, quality_score)

        claim_id = await self.store.insert_if_absent(
            {
                "original_text": text,
                "normalized_text": normalized,
                "topic": topic.value,
                "first_debate_id": usage["debate_id"],
                "first_turn_id": usage["turn_id"],
                "total_uses": 1,
                "avg_quality_score": float(quality_score),
            },
            usage,
        )
        if claim_id is None:
            # Another writer created the same normalized text first.
            winner = await self.store.get_by_normalized_text(normalized)
            if winner is None:
                raise ConcurrencyError(
                    "Claim insert conflicted but no winning row was found",
                    ErrorContext(operation="add_claim"),
                )
            logger.info(
                "Claim insert lost race, recording usage on existing claim",
                extra={"claim_id": winner.id, "operation": "add_claim"},
            )
            return await self._add_usage(winner.id, usage, quality_score)

        claim = await self.store.get_by_id(claim_id)
        logger.info(
            f"Created claim in knowledge graph: {text[:50]!r}",
            extra={"claim_id": claim_id, "topic": topic.value},
        )
        await self.link_similar_claims(claim)
        return await self.store.get_by_id(claim_id)

    async def _add_usage(
        self, claim_id: ClaimId, usage: dict, quality_score: float,
    ) -> ClaimLike:
        await self.store.record_usage(claim_id, usage, float(quality_score))
        claim = await self.store.get_by_id(claim_id)
        logger.info(
            f"Updated existing claim (total uses: {claim.total_uses})",
            extra={"claim_id": claim_id, "debate_id": usage["debate_id"]},
        )
        return claim

    async def link_similar_claims(
        self, claim: ClaimLike, threshold: float | None = None,
    ) -> list[SimilarMatch]:
        """Link claim to same-topic candidates whose Jaccard score >= threshold.

        Mirrored edges are added to each matched claim as they are found; the
        claim's own outgoing set is then replaced by the matches in one write.
        """
        if threshold is None:
            threshold = self.settings.similarity_threshold
        started_at = datetime.now(timezone.utc)

        candidates = await self.store.find_link_candidates(
            claim.topic, claim.id, self.settings.link_candidate_limit,
        )
        matches = select_similar(claim.normalized_text, candidates, threshold)

        for match in matches:
            await self.store.add_relation_if_absent(
                match.claim_id, claim.id,
                RelationshipType.SIMILAR.value, match.similarity,
            )
        await self.store.replace_relations(
            claim.id, matches, RelationshipType.SIMILAR.value, started_at,
        )

        if matches:
            logger.info(
                f"Linked {len(matches)} similar claims",
                extra={"claim_id": claim.id, "topic": claim.topic},
            )
        return matches

    async def mark_refuted(
        self,
        original_text: str,
        refuting_text: str,
        effectiveness: int | None = None,
    ) -> ClaimLike | None:
        """Count a refutation against the original and link the refuter.

        Returns the updated original claim, or None when it is not in the graph.
        """
        if effectiveness is None:
            effectiveness = self.settings.default_effectiveness
        if not MIN_EFFECTIVENESS <= effectiveness <= MAX_EFFECTIVENESS:
            raise ClaimValidationError(
                f"effectiveness must be between {MIN_EFFECTIVENESS} and {MAX_EFFECTIVENESS}",
                "effectiveness",
            )
        normalized_original = _normalized_or_reject(original_text, "original_text")
        normalized_refuting = _normalized_or_reject(refuting_text, "refuting_text")

        original = await self.store.get_by_normalized_text(normalized_original)
        refuting = await self.store.get_by_normalized_text(normalized_refuting)

        if original is None:
            logger.info(
                "Refutation skipped: original claim not in graph",
                extra={"operation": "mark_refuted"},
            )
            return None

        await self.store.increment_refuted(original.id)

        if refuting is None:
            logger.info(
                "Refuting claim not in graph, counter edge skipped",
                extra={"claim_id": original.id, "operation": "mark_refuted"},
            )
        elif await self.store.add_counter_claim_if_absent(
            original.id, refuting.id, effectiveness,
        ):
            logger.info(
                "Linked refutation relationship",
                extra={"claim_id": original.id},
            )

        return await self.store.get_by_id(original.id)

    async def record_outcome(self, claim_id: ClaimId, won: bool) -> ClaimLike:
        """Attribute a debate win or loss to a claim."""
        if not await self.store.increment_outcome(claim_id, won):
            raise ClaimNotFoundError(
                str(claim_id), ErrorContext(claim_id=str(claim_id)),
            )
        return await self.store.get_by_id(claim_id)

    async def record_debate_outcome(
        self, debate_id: str, winning_side: Side | str,
    ) -> int:
        """Record an outcome for every claim use in a concluded debate."""
        winning_side = _parse_side(winning_side)
        usages = await self.store.get_usages_for_debate(str(debate_id))
        for usage in usages:
            await self.record_outcome(
                usage.claim_id, usage.side == winning_side.value,
            )
        logger.info(
            f"Recorded {len(usages)} claim outcomes",
            extra={"debate_id": debate_id},
        )
        return len(usages)
