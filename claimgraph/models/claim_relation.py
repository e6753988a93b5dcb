"""ClaimRelation ORM — typed edges between claims (similar, refutes, supports, extends).

Invariants:
    - Connects two Claims (source_claim_id -> target_claim_id)
    - UNIQUE(source, target, relationship): re-adding an edge is a no-op
    - similar edges are written on both endpoints (two rows)

Design Decisions:
    - Adjacency rows instead of an embedded array: each endpoint's edge set can
      grow concurrently with insert-if-absent, no read-modify-write of a list
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from claimgraph.db.base import Base


class ClaimRelation(Base):
    """Directed edge from one claim to a related claim."""
    __tablename__ = "claim_relations"
    __table_args__ = (
        UniqueConstraint(
            "source_claim_id", "target_claim_id", "relationship",
            name="uq_claim_relations_edge",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    source_claim_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("claims.id"),
        nullable=False, index=True,
    )
    target_claim_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("claims.id"), nullable=False,
    )
    relationship: Mapped[str] = mapped_column(
        String(20), nullable=False, default="similar",
    )
    similarity: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
