"""Claim Schemas — Pydantic request/response models for claim mutations.

Invariants:
    - Claim texts are stripped and non-empty (400 otherwise)
    - quality_score bounded 0–10, effectiveness bounded 0–10
    - side restricted to the Side enum

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - from_attributes on responses: built straight from Claim ORM rows
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from claimgraph.core.claim_stats import success_rate
from claimgraph.core.domain_types import Side, Topic


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("text cannot be empty or whitespace")
    return v


class ClaimCreate(BaseModel):
    """A claim extracted from a completed debate turn."""
    claim_text: str = Field(min_length=1, max_length=10_000)
    debate_id: str = Field(min_length=1, max_length=64)
    turn_id: str = Field(min_length=1, max_length=64)
    side: Side
    quality_score: float = Field(0.0, ge=0.0, le=10.0)

    @field_validator("claim_text")
    @classmethod
    def strip_claim_text(cls, v: str) -> str:
        return _strip_required(v)


class RefutationCreate(BaseModel):
    """One claim refuted by another."""
    original_text: str = Field(min_length=1, max_length=10_000)
    refuting_text: str = Field(min_length=1, max_length=10_000)
    effectiveness: int | None = Field(None, ge=0, le=10)

    @field_validator("original_text", "refuting_text")
    @classmethod
    def strip_texts(cls, v: str) -> str:
        return _strip_required(v)


class ClaimStatsRequest(BaseModel):
    claim_text: str = Field(min_length=1, max_length=10_000)

    @field_validator("claim_text")
    @classmethod
    def strip_claim_text(cls, v: str) -> str:
        return _strip_required(v)


class OutcomeUpdate(BaseModel):
    won: bool


class DebateOutcome(BaseModel):
    winning_side: Side


class ClaimStatsBlock(BaseModel):
    """Raw usage/outcome counters of a claim."""
    total_uses: int
    times_refuted: int
    wins_with_claim: int
    losses_with_claim: int
    avg_quality_score: float
    success_rate: float


class ClaimResponse(BaseModel):
    """Claim as stored, with counters."""
    id: UUID
    original_text: str
    normalized_text: str
    topic: Topic
    first_debate_id: str
    first_turn_id: str
    stats: ClaimStatsBlock
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_claim(cls, claim) -> "ClaimResponse":
        return cls(
            id=claim.id,
            original_text=claim.original_text,
            normalized_text=claim.normalized_text,
            topic=claim.topic,
            first_debate_id=claim.first_debate_id,
            first_turn_id=claim.first_turn_id,
            stats=ClaimStatsBlock(
                total_uses=claim.total_uses,
                times_refuted=claim.times_refuted,
                wins_with_claim=claim.wins_with_claim,
                losses_with_claim=claim.losses_with_claim,
                avg_quality_score=claim.avg_quality_score,
                success_rate=success_rate(
                    claim.wins_with_claim, claim.losses_with_claim,
                ),
            ),
            created_at=claim.created_at,
            updated_at=claim.updated_at,
        )


class RefutationResult(BaseModel):
    """Whether the original claim was found and its state afterwards."""
    original_found: bool
    claim: ClaimResponse | None = None


class DebateOutcomeResult(BaseModel):
    debate_id: str
    outcomes_recorded: int


class UsageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    debate_id: str
    turn_id: str
    side: Side
    used_at: datetime
