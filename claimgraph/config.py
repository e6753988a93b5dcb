"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Graph tunables (threshold, candidate cap, effectiveness) bounded by validation

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from claimgraph.core.domain_types import (
    SIMILARITY_THRESHOLD, LINK_CANDIDATE_LIMIT, DEFAULT_EFFECTIVENESS,
    DEFAULT_QUERY_LIMIT, TOPIC_QUERY_LIMIT, MAX_QUERY_LIMIT,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://claims:claims@db:5432/claimgraph"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10
    database_pool_timeout_seconds: int = 30
    database_command_timeout_seconds: int = 30

    # Claim graph
    similarity_threshold: float = Field(SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    link_candidate_limit: int = Field(LINK_CANDIDATE_LIMIT, ge=1)
    default_effectiveness: int = Field(DEFAULT_EFFECTIVENESS, ge=0, le=10)

    # Queries
    default_query_limit: int = DEFAULT_QUERY_LIMIT
    topic_query_limit: int = TOPIC_QUERY_LIMIT
    max_query_limit: int = MAX_QUERY_LIMIT

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
