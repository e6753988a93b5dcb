"""Claim ORM — canonical record for one unique normalized argument.

Invariants:
    - normalized_text is UNIQUE: at most one Claim per canonical text
    - topic is written once at creation and never updated
    - total_uses equals the number of ClaimUsage rows for the claim
    - success_rate is only ever written together with wins/losses, derived from them
    - updated_at refreshed on every mutation (repository sets it explicitly)

Design Decisions:
    - Stats as flat columns: single-statement atomic increments (col = col + 1)
    - Edges live in their own tables (claim_relations, counter_claims) with
      unique constraints, so concurrent writers merge instead of overwriting
    - embedding kept as nullable JSON: reserved, read by no algorithm
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, Float, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from claimgraph.db.base import Base


class Claim(Base):
    """Claim node — deduplicated argument tracked across debates."""
    __tablename__ = "claims"
    __table_args__ = (
        Index("ix_claims_topic_total_uses", "topic", "total_uses"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    original_text: Mapped[str] = mapped_column(Text, nullable=False)
    normalized_text: Mapped[str] = mapped_column(
        Text, nullable=False, unique=True,
    )
    topic: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    first_debate_id: Mapped[str] = mapped_column(String(64), nullable=False)
    first_turn_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Usage statistics
    total_uses: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, index=True,
    )
    times_refuted: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    wins_with_claim: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    losses_with_claim: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    avg_quality_score: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    success_rate: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, index=True,
    )

    embedding: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    usages: Mapped[list["ClaimUsage"]] = relationship(
        "ClaimUsage", back_populates="claim",
        order_by="ClaimUsage.used_at", lazy="selectin",
    )
    related_claims: Mapped[list["ClaimRelation"]] = relationship(
        "ClaimRelation",
        foreign_keys="ClaimRelation.source_claim_id",
        order_by="ClaimRelation.created_at",
        lazy="selectin",
    )
    counter_claims: Mapped[list["CounterClaim"]] = relationship(
        "CounterClaim",
        foreign_keys="CounterClaim.claim_id",
        order_by="CounterClaim.created_at",
        lazy="selectin",
    )
