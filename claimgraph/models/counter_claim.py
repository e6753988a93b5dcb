"""CounterClaim ORM — directed edge from a claim to a claim that refuted it.

Invariants:
    - Asymmetric: only original -> refuting claim is stored
    - UNIQUE(claim_id, counter_claim_id): one edge per refuter
    - effectiveness bounded 0–10 (validated at the service boundary)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from claimgraph.db.base import Base


class CounterClaim(Base):
    """Refutation edge with an effectiveness score."""
    __tablename__ = "counter_claims"
    __table_args__ = (
        UniqueConstraint(
            "claim_id", "counter_claim_id", name="uq_counter_claims_edge",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    claim_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("claims.id"),
        nullable=False, index=True,
    )
    counter_claim_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("claims.id"), nullable=False,
    )
    effectiveness: Mapped[int] = mapped_column(
        Integer, nullable=False, default=5,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
