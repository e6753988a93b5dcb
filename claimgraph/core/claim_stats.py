"""Claim Stats Projection — pure shaping of claim rows into API-facing stats views.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Percentages and averages rounded half-up to integers (0.5 -> 1)
    - success_rate recomputed from wins/losses, never trusted from a stored copy
    - Never raises on missing optional data — absent counters default to 0
"""

import math


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def success_rate(wins: int, losses: int) -> float:
    """wins / (wins + losses); 0.0 when there are no outcomes yet."""
    total = wins + losses
    if total <= 0:
        return 0.0
    return wins / total


def as_percent(ratio: float) -> int:
    """0.6666 -> 67."""
    return round_half_up(ratio * 100)


def project_stats(claim) -> dict:
    """Rounded stats block for a claim stats lookup."""
    return {
        "total_uses": claim.total_uses,
        "times_refuted": claim.times_refuted,
        "wins_with_claim": claim.wins_with_claim,
        "losses_with_claim": claim.losses_with_claim,
        "success_rate": as_percent(
            success_rate(claim.wins_with_claim, claim.losses_with_claim),
        ),
        "avg_quality_score": round_half_up(claim.avg_quality_score or 0.0),
    }


def raw_stats(claim) -> dict:
    """Unrounded stats block for relationship views."""
    return {
        "total_uses": claim.total_uses,
        "times_refuted": claim.times_refuted,
        "wins_with_claim": claim.wins_with_claim,
        "losses_with_claim": claim.losses_with_claim,
        "avg_quality_score": claim.avg_quality_score,
        "success_rate": success_rate(
            claim.wins_with_claim, claim.losses_with_claim,
        ),
    }


def summarize_related(relation, target) -> dict:
    """Related-claim summary: text, similarity percent, target usage count."""
    return {
        "text": target.original_text,
        "relationship": relation.relationship,
        "similarity": as_percent(relation.similarity or 0.0),
        "uses": target.total_uses,
    }


def summarize_counter(counter, target) -> dict:
    """Counter-claim summary: text, effectiveness, target usage count."""
    return {
        "text": target.original_text,
        "effectiveness": counter.effectiveness,
        "uses": target.total_uses,
    }


def average_claims_per_debate(claim_debate_pairs: int, debates: int) -> float:
    """Distinct (claim, debate) pairs per distinct debate; 0.0 without debates."""
    if debates <= 0:
        return 0.0
    return claim_debate_pairs / debates
