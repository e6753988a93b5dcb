"""Service test fixtures — async DB, claim store, graph services, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests.
      SQLite takes the token-overlap search path; PostgreSQL full-text ranking
      is covered by test_postgres_search.py, which overrides test_engine and
      runs only when CLAIMGRAPH_TEST_POSTGRES_URL is set
    - Services get an explicit Settings so env overrides cannot shift thresholds
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

import claimgraph.models  # noqa: F401  (registers tables on Base.metadata)
from claimgraph.config import Settings
from claimgraph.db.base import Base
from claimgraph.infrastructure.claim_repository import SqlClaimRepository
from claimgraph.infrastructure.database import get_db, DatabaseSessionManager
import claimgraph.infrastructure.database as db_module
from claimgraph.main import app
from claimgraph.services.claim_graph import ClaimGraphService
from claimgraph.services.claim_queries import ClaimQueryService


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        similarity_threshold=0.6,
        link_candidate_limit=20,
        default_effectiveness=5,
    )


@pytest.fixture
def store(test_db):
    return SqlClaimRepository(test_db)


@pytest.fixture
def graph(store, settings):
    return ClaimGraphService(store, settings)


@pytest.fixture
def queries(store, settings):
    return ClaimQueryService(store, settings)


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
