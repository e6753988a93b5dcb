"""ClaimUsage ORM — append-only log of debate turns in which a claim was used.

Invariants:
    - Always belongs to a Claim (claim_id FK)
    - side is one of: for, against
    - Rows are only ever inserted, never updated or deleted

Design Decisions:
    - debate_id/turn_id are opaque strings: the debate domain lives in another service
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from claimgraph.db.base import Base


class ClaimUsage(Base):
    """One use of a claim in a debate turn."""
    __tablename__ = "claim_usages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    claim_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("claims.id"),
        nullable=False, index=True,
    )
    debate_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    turn_id: Mapped[str] = mapped_column(String(64), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    claim: Mapped["Claim"] = relationship("Claim", back_populates="usages")
