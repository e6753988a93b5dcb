"""Claim graph schema — claims, usage log, related-claim edges, counter-claim edges.

Revision ID: 001_claim_graph
Revises:
Create Date: 2026-10-17

Unique indexes back the store's insert-if-absent writes:
claims.normalized_text, (source, target, relationship), (claim, counter_claim).
A GIN index over to_tsvector('simple', normalized_text) serves claim search.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_claim_graph"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "claims",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("original_text", sa.Text, nullable=False),
        sa.Column("normalized_text", sa.Text, nullable=False, unique=True),
        sa.Column("topic", sa.String(20), nullable=False),
        sa.Column("first_debate_id", sa.String(64), nullable=False),
        sa.Column("first_turn_id", sa.String(64), nullable=False),
        sa.Column("total_uses", sa.Integer, nullable=False, server_default="1"),
        sa.Column("times_refuted", sa.Integer, nullable=False, server_default="0"),
        sa.Column("wins_with_claim", sa.Integer, nullable=False, server_default="0"),
        sa.Column("losses_with_claim", sa.Integer, nullable=False, server_default="0"),
        sa.Column("avg_quality_score", sa.Float, nullable=False, server_default="0"),
        sa.Column("success_rate", sa.Float, nullable=False, server_default="0"),
        sa.Column("embedding", sa.JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_claims_topic", "claims", ["topic"])
    op.create_index("ix_claims_total_uses", "claims", ["total_uses"])
    op.create_index("ix_claims_success_rate", "claims", ["success_rate"])
    op.create_index("ix_claims_created_at", "claims", ["created_at"])
    op.create_index("ix_claims_topic_total_uses", "claims", ["topic", "total_uses"])
    op.execute(
        "CREATE INDEX ix_claims_normalized_text_fts ON claims "
        "USING GIN (to_tsvector('simple', normalized_text))"
    )

    op.create_table(
        "claim_usages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("claim_id", UUID(as_uuid=True), sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("debate_id", sa.String(64), nullable=False),
        sa.Column("turn_id", sa.String(64), nullable=False),
        sa.Column("side", sa.String(10), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_claim_usages_claim_id", "claim_usages", ["claim_id"])
    op.create_index("ix_claim_usages_debate_id", "claim_usages", ["debate_id"])

    op.create_table(
        "claim_relations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("source_claim_id", UUID(as_uuid=True), sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("target_claim_id", UUID(as_uuid=True), sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("relationship", sa.String(20), nullable=False, server_default="similar"),
        sa.Column("similarity", sa.Float, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "source_claim_id", "target_claim_id", "relationship",
            name="uq_claim_relations_edge",
        ),
    )
    op.create_index("ix_claim_relations_source_claim_id", "claim_relations", ["source_claim_id"])

    op.create_table(
        "counter_claims",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("claim_id", UUID(as_uuid=True), sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("counter_claim_id", UUID(as_uuid=True), sa.ForeignKey("claims.id"), nullable=False),
        sa.Column("effectiveness", sa.Integer, nullable=False, server_default="5"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("claim_id", "counter_claim_id", name="uq_counter_claims_edge"),
    )
    op.create_index("ix_counter_claims_claim_id", "counter_claims", ["claim_id"])


def downgrade() -> None:
    op.drop_table("counter_claims")
    op.drop_table("claim_relations")
    op.drop_table("claim_usages")
    op.execute("DROP INDEX IF EXISTS ix_claims_normalized_text_fts")
    op.drop_table("claims")
