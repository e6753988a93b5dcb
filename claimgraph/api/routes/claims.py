"""Claim Event Routes — producer hooks that mutate the claim graph.

Invariants:
    - POST /claims records one claim use (201 with the canonical claim)
    - Refutations of claims that are not in the graph return 200 with
      original_found=false, never an error
    - Outcome for an unknown claim id -> 404

Design Decisions:
    - Routes never contain business logic: ClaimGraphService owns every step
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from claimgraph.api.dependencies import get_graph_service
from claimgraph.core.domain_types import ClaimId
from claimgraph.schemas.claim import (
    ClaimCreate, ClaimResponse, DebateOutcome, DebateOutcomeResult,
    OutcomeUpdate, RefutationCreate, RefutationResult,
)
from claimgraph.services.claim_graph import ClaimGraphService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/knowledge-graph", tags=["claims"])


@router.post(
    "/claims", response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_claim(
    body: ClaimCreate,
    service: ClaimGraphService = Depends(get_graph_service),
):
    """Record a claim used in a completed debate turn."""
    claim = await service.add_claim(
        body.claim_text, body.debate_id, body.turn_id,
        body.side, body.quality_score,
    )
    return ClaimResponse.from_claim(claim)


@router.post("/claims/refutations", response_model=RefutationResult)
async def mark_refuted(
    body: RefutationCreate,
    service: ClaimGraphService = Depends(get_graph_service),
):
    """Count a refutation and link the refuting claim when both are known."""
    claim = await service.mark_refuted(
        body.original_text, body.refuting_text, body.effectiveness,
    )
    if claim is None:
        return RefutationResult(original_found=False)
    return RefutationResult(
        original_found=True, claim=ClaimResponse.from_claim(claim),
    )


@router.post("/claims/{claim_id}/outcome", response_model=ClaimResponse)
async def record_outcome(
    claim_id: UUID,
    body: OutcomeUpdate,
    service: ClaimGraphService = Depends(get_graph_service),
):
    """Attribute a win or loss to one claim."""
    claim = await service.record_outcome(ClaimId(claim_id), body.won)
    return ClaimResponse.from_claim(claim)


@router.post(
    "/debates/{debate_id}/outcome", response_model=DebateOutcomeResult,
)
async def record_debate_outcome(
    debate_id: str,
    body: DebateOutcome,
    service: ClaimGraphService = Depends(get_graph_service),
):
    """Attribute a concluded debate's result to every claim used in it."""
    recorded = await service.record_debate_outcome(debate_id, body.winning_side)
    return DebateOutcomeResult(debate_id=debate_id, outcomes_recorded=recorded)
