"""ORM Models — SQLAlchemy declarative models for the claim graph.

Invariants:
    - All models inherit from Base (db/base.py)
    - Claim is the aggregate root; usages and edges reference claims.id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from claimgraph.models.claim import Claim  # noqa: F401
from claimgraph.models.claim_usage import ClaimUsage  # noqa: F401
from claimgraph.models.claim_relation import ClaimRelation  # noqa: F401
from claimgraph.models.counter_claim import CounterClaim  # noqa: F401
