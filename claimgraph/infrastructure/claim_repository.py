"""Claim Repository — SQLAlchemy implementation of the ClaimStore protocol.

Invariants:
    - Every mutating method commits its own unit of work before returning
    - Claim creation is insert-if-absent on the UNIQUE normalized_text index
    - Counters change only through single-statement increments (col = col + 1)
    - Edge writes are ON CONFLICT inserts/upserts: concurrent writers merge rows
    - SQLAlchemyError never escapes: mapped to DatabaseError after rollback

Design Decisions:
    - Dialect-specific insert (postgresql / sqlite): both support
      ON CONFLICT ... RETURNING, which gives an atomic insert-if-absent
    - Full-text search uses the PostgreSQL GIN index (ts_rank); other dialects
      fall back to token-overlap ranking computed after a LIKE prefilter
    - Reads use populate_existing so rows mutated by Core UPDATEs are refreshed
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import reduce
from typing import AsyncGenerator
from uuid import UUID, uuid4

from sqlalchemy import Float, cast, delete, distinct, func, insert, or_, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from claimgraph.core.domain_types import ClaimId, ClaimSort, Topic
from claimgraph.core.errors import DatabaseError
from claimgraph.core.normalize_text import tokenize_normalized
from claimgraph.core.similarity import SimilarMatch
from claimgraph.models.claim import Claim
from claimgraph.models.claim_usage import ClaimUsage
from claimgraph.models.claim_relation import ClaimRelation
from claimgraph.models.counter_claim import CounterClaim

logger = logging.getLogger(__name__)

_SORT_ORDER = {
    ClaimSort.POPULAR: (Claim.total_uses.desc(), Claim.created_at.asc()),
    ClaimSort.SUCCESSFUL: (Claim.success_rate.desc(), Claim.total_uses.desc()),
    ClaimSort.RECENT: (Claim.created_at.desc(),),
    ClaimSort.NONE: (Claim.created_at.asc(),),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SqlClaimRepository:
    """ClaimStore backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _store_errors(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Claim store {operation} failed: {e}",
                extra={"operation": operation},
            )
            raise DatabaseError("Claim store operation failed", operation) from e

    def _dialect(self) -> str:
        return self.db.get_bind().dialect.name

    def _upsert(self, model):
        dialect = self._dialect()
        if dialect == "postgresql":
            return pg_insert(model)
        if dialect == "sqlite":
            return sqlite_insert(model)
        raise DatabaseError(f"unsupported dialect '{dialect}'", "insert")

    # ─── Lookups ─────────────────────────────────────────────────

    async def get_by_id(self, claim_id: ClaimId) -> Claim | None:
        async with self._store_errors("get_by_id"):
            result = await self.db.execute(
                select(Claim)
                .where(Claim.id == claim_id)
                .execution_options(populate_existing=True),
            )
            return result.scalar_one_or_none()

    async def get_by_normalized_text(self, normalized: str) -> Claim | None:
        async with self._store_errors("get_by_normalized_text"):
            result = await self.db.execute(
                select(Claim)
                .where(Claim.normalized_text == normalized)
                .execution_options(populate_existing=True),
            )
            return result.scalar_one_or_none()

    async def get_many(self, claim_ids: list[UUID]) -> dict[UUID, Claim]:
        if not claim_ids:
            return {}
        async with self._store_errors("get_many"):
            result = await self.db.execute(
                select(Claim)
                .where(Claim.id.in_(set(claim_ids)))
                .execution_options(populate_existing=True),
            )
            return {c.id: c for c in result.scalars().all()}

    # ─── Mutations ───────────────────────────────────────────────

    async def insert_if_absent(
        self, claim_data: dict, usage_data: dict,
    ) -> ClaimId | None:
        """Insert claim + first usage. None when normalized_text already exists."""
        now = _now()
        async with self._store_errors("insert"):
            stmt = (
                self._upsert(Claim)
                .values(
                    id=uuid4(), created_at=now, updated_at=now,
                    times_refuted=0, wins_with_claim=0, losses_with_claim=0,
                    success_rate=0.0, **claim_data,
                )
                .on_conflict_do_nothing(index_elements=["normalized_text"])
                .returning(Claim.id)
            )
            claim_id = (await self.db.execute(stmt)).scalar_one_or_none()
            if claim_id is None:
                return None
            await self.db.execute(
                insert(ClaimUsage).values(
                    id=uuid4(), claim_id=claim_id, used_at=now, **usage_data,
                ),
            )
            await self.db.commit()
            return ClaimId(claim_id)

    async def record_usage(
        self, claim_id: ClaimId, usage_data: dict, quality_score: float,
    ) -> None:
        """Append a usage row and fold quality_score into the running mean."""
        now = _now()
        async with self._store_errors("record_usage"):
            await self.db.execute(
                insert(ClaimUsage).values(
                    id=uuid4(), claim_id=claim_id, used_at=now, **usage_data,
                ),
            )
            # SET expressions read the pre-update row.
            await self.db.execute(
                update(Claim)
                .where(Claim.id == claim_id)
                .values(
                    total_uses=Claim.total_uses + 1,
                    avg_quality_score=(
                        (Claim.avg_quality_score * Claim.total_uses + quality_score)
                        / (Claim.total_uses + 1)
                    ),
                    updated_at=now,
                )
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()

    async def add_relation_if_absent(
        self, source_id: ClaimId, target_id: ClaimId,
        relationship: str, similarity: float | None,
    ) -> bool:
        now = _now()
        async with self._store_errors("add_relation"):
            stmt = (
                self._upsert(ClaimRelation)
                .values(
                    id=uuid4(), source_claim_id=source_id,
                    target_claim_id=target_id, relationship=relationship,
                    similarity=similarity, created_at=now,
                )
                .on_conflict_do_nothing(
                    index_elements=[
                        "source_claim_id", "target_claim_id", "relationship",
                    ],
                )
                .returning(ClaimRelation.id)
            )
            inserted = (await self.db.execute(stmt)).scalar_one_or_none() is not None
            if inserted:
                await self._touch(source_id, now)
            await self.db.commit()
            return inserted

    async def replace_relations(
        self, source_id: ClaimId, matches: list[SimilarMatch],
        relationship: str, stale_before: datetime,
    ) -> None:
        """Make matches the claim's outgoing edge set.

        Only edges that existed before stale_before are removed, so edges that
        concurrent linkers wrote during this run survive.
        """
        now = _now()
        keep = [m.claim_id for m in matches]
        async with self._store_errors("replace_relations"):
            stale = (
                delete(ClaimRelation)
                .where(ClaimRelation.source_claim_id == source_id)
                .where(ClaimRelation.created_at < stale_before)
            )
            if keep:
                stale = stale.where(ClaimRelation.target_claim_id.not_in(keep))
            await self.db.execute(
                stale.execution_options(synchronize_session=False),
            )
            for match in matches:
                stmt = self._upsert(ClaimRelation).values(
                    id=uuid4(), source_claim_id=source_id,
                    target_claim_id=match.claim_id, relationship=relationship,
                    similarity=match.similarity, created_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[
                        "source_claim_id", "target_claim_id", "relationship",
                    ],
                    set_={"similarity": stmt.excluded.similarity},
                )
                await self.db.execute(stmt)
            await self._touch(source_id, now)
            await self.db.commit()

    async def increment_refuted(self, claim_id: ClaimId) -> None:
        async with self._store_errors("increment_refuted"):
            await self.db.execute(
                update(Claim)
                .where(Claim.id == claim_id)
                .values(times_refuted=Claim.times_refuted + 1, updated_at=_now())
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()

    async def add_counter_claim_if_absent(
        self, claim_id: ClaimId, counter_id: ClaimId, effectiveness: int,
    ) -> bool:
        now = _now()
        async with self._store_errors("add_counter_claim"):
            stmt = (
                self._upsert(CounterClaim)
                .values(
                    id=uuid4(), claim_id=claim_id, counter_claim_id=counter_id,
                    effectiveness=effectiveness, created_at=now,
                )
                .on_conflict_do_nothing(
                    index_elements=["claim_id", "counter_claim_id"],
                )
                .returning(CounterClaim.id)
            )
            inserted = (await self.db.execute(stmt)).scalar_one_or_none() is not None
            if inserted:
                await self._touch(claim_id, now)
            await self.db.commit()
            return inserted

    async def increment_outcome(self, claim_id: ClaimId, won: bool) -> bool:
        """Bump wins or losses; success_rate recomputed in the same statement."""
        wins = Claim.wins_with_claim + 1 if won else Claim.wins_with_claim
        losses = Claim.losses_with_claim if won else Claim.losses_with_claim + 1
        async with self._store_errors("increment_outcome"):
            result = await self.db.execute(
                update(Claim)
                .where(Claim.id == claim_id)
                .values(
                    wins_with_claim=wins,
                    losses_with_claim=losses,
                    success_rate=cast(wins, Float) / (wins + losses),
                    updated_at=_now(),
                )
                .execution_options(synchronize_session=False),
            )
            await self.db.commit()
            return result.rowcount > 0

    async def _touch(self, claim_id: ClaimId, now: datetime) -> None:
        await self.db.execute(
            update(Claim)
            .where(Claim.id == claim_id)
            .values(updated_at=now)
            .execution_options(synchronize_session=False),
        )

    # ─── Queries ─────────────────────────────────────────────────

    async def find_link_candidates(
        self, topic: str, exclude_id: ClaimId, limit: int,
    ) -> list[tuple[UUID, str]]:
        # Oldest first: once a topic exceeds the limit, newer claims are never candidates.
        async with self._store_errors("find_link_candidates"):
            result = await self.db.execute(
                select(Claim.id, Claim.normalized_text)
                .where(Claim.topic == topic)
                .where(Claim.id != exclude_id)
                .order_by(Claim.created_at.asc())
                .limit(limit),
            )
            return [(row.id, row.normalized_text) for row in result.all()]

    async def list_claims(
        self, topic: Topic | None, sort: ClaimSort, limit: int,
    ) -> list[Claim]:
        query = select(Claim)
        if topic is not None:
            query = query.where(Claim.topic == Topic(topic).value)
        query = (
            query.order_by(*_SORT_ORDER[sort])
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        async with self._store_errors("list_claims"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def search(
        self, normalized_query: str, limit: int,
    ) -> list[tuple[Claim, float]]:
        tokens = sorted(tokenize_normalized(normalized_query))
        if not tokens:
            return []
        async with self._store_errors("search"):
            if self._dialect() == "postgresql":
                return await self._search_fulltext(tokens, limit)
            return await self._search_token_overlap(tokens, limit)

    async def _search_fulltext(
        self, tokens: list[str], limit: int,
    ) -> list[tuple[Claim, float]]:
        # Any-term match, like a document-store $text search.
        ts_query = reduce(
            lambda a, b: a.op("||")(b),
            [func.plainto_tsquery("simple", t) for t in tokens],
        )
        vector = func.to_tsvector("simple", Claim.normalized_text)
        rank = func.ts_rank(vector, ts_query).label("rank")
        result = await self.db.execute(
            select(Claim, rank)
            .where(vector.op("@@")(ts_query))
            .order_by(rank.desc())
            .limit(limit)
            .execution_options(populate_existing=True),
        )
        return [(row[0], float(row[1])) for row in result.all()]

    async def _search_token_overlap(
        self, tokens: list[str], limit: int,
    ) -> list[tuple[Claim, float]]:
        result = await self.db.execute(
            select(Claim)
            .where(or_(*[Claim.normalized_text.contains(t, autoescape=True) for t in tokens]))
            .order_by(Claim.created_at.asc())
            .execution_options(populate_existing=True),
        )
        wanted = set(tokens)
        scored = []
        for claim in result.scalars().all():
            hits = len(wanted & tokenize_normalized(claim.normalized_text))
            if hits:
                scored.append((claim, hits / len(wanted)))
        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:limit]

    async def get_usages_for_debate(self, debate_id: str) -> list[ClaimUsage]:
        async with self._store_errors("get_usages_for_debate"):
            result = await self.db.execute(
                select(ClaimUsage)
                .where(ClaimUsage.debate_id == debate_id)
                .order_by(ClaimUsage.used_at.asc()),
            )
            return list(result.scalars().all())

    async def count_claims(self) -> int:
        async with self._store_errors("count_claims"):
            return (await self.db.execute(
                select(func.count()).select_from(Claim),
            )).scalar_one()

    async def count_relations(self) -> int:
        """Sum of every claim's related-edge count (mirrored edges count twice)."""
        async with self._store_errors("count_relations"):
            return (await self.db.execute(
                select(func.count()).select_from(ClaimRelation),
            )).scalar_one()

    async def count_counter_claims(self) -> int:
        async with self._store_errors("count_counter_claims"):
            return (await self.db.execute(
                select(func.count()).select_from(CounterClaim),
            )).scalar_one()

    async def topic_distribution(self) -> list[tuple[str, int]]:
        count = func.count(Claim.id).label("count")
        async with self._store_errors("topic_distribution"):
            result = await self.db.execute(
                select(Claim.topic, count)
                .group_by(Claim.topic)
                .order_by(count.desc(), Claim.topic.asc()),
            )
            return [(row[0], row[1]) for row in result.all()]

    async def debate_usage_counts(self) -> tuple[int, int]:
        """(distinct claim/debate pairs, distinct debates)."""
        pairs = (
            select(ClaimUsage.claim_id, ClaimUsage.debate_id)
            .distinct()
            .subquery()
        )
        async with self._store_errors("debate_usage_counts"):
            pair_count = (await self.db.execute(
                select(func.count()).select_from(pairs),
            )).scalar_one()
            debate_count = (await self.db.execute(
                select(func.count(distinct(ClaimUsage.debate_id))),
            )).scalar_one()
            return pair_count, debate_count
