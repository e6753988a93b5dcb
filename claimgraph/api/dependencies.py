"""Route Dependencies — wire request-scoped DB sessions into graph services.

Invariants:
    - One AsyncSession per request (get_db); services never outlive the request
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from claimgraph.config import get_settings
from claimgraph.infrastructure.claim_repository import SqlClaimRepository
from claimgraph.infrastructure.database import get_db
from claimgraph.services.claim_graph import ClaimGraphService
from claimgraph.services.claim_queries import ClaimQueryService


def get_graph_service(db: AsyncSession = Depends(get_db)) -> ClaimGraphService:
    return ClaimGraphService(SqlClaimRepository(db), get_settings())


def get_query_service(db: AsyncSession = Depends(get_db)) -> ClaimQueryService:
    return ClaimQueryService(SqlClaimRepository(db), get_settings())
