"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ClaimId wraps UUID — never use bare UUID in domain logic
    - Similarity is bounded 0.0–1.0, Effectiveness 0–10
    - All valid states encoded as Enums — no raw string matching
    - Topic declaration order is the classifier's tie-break order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: stored as plain strings and serialized to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ClaimId = NewType("ClaimId", UUID)
DebateRef = NewType("DebateRef", str)
TurnRef = NewType("TurnRef", str)


# ─── Value Types ─────────────────────────────────────────────────

Similarity = NewType("Similarity", float)         # 0.0–1.0
Effectiveness = NewType("Effectiveness", int)     # 0–10
QualityScore = NewType("QualityScore", float)     # 0.0–10.0


# ─── Enums ───────────────────────────────────────────────────────

class Topic(str, Enum):
    """Fixed topic enumeration — assigned once at claim creation."""
    POLITICS = "politics"
    ECONOMY = "economy"
    TECHNOLOGY = "technology"
    ENVIRONMENT = "environment"
    HEALTH = "health"
    EDUCATION = "education"
    ETHICS = "ethics"
    GENERAL = "general"


class Side(str, Enum):
    """Debate side a claim was argued from."""
    FOR = "for"
    AGAINST = "against"


class RelationshipType(str, Enum):
    """Edge kinds stored in claim_relations."""
    SIMILAR = "similar"
    REFUTES = "refutes"
    SUPPORTS = "supports"
    EXTENDS = "extends"


class ClaimSort(str, Enum):
    """Sort keys accepted by get_claims_by_topic."""
    POPULAR = "popular"
    SUCCESSFUL = "successful"
    RECENT = "recent"
    NONE = "none"


# ─── Limits & Tunables ──────────────────────────────────────────

SIMILARITY_THRESHOLD = 0.6
LINK_CANDIDATE_LIMIT = 20
DEFAULT_EFFECTIVENESS = 5
MIN_EFFECTIVENESS = 0
MAX_EFFECTIVENESS = 10
DEFAULT_QUERY_LIMIT = 10
TOPIC_QUERY_LIMIT = 20
MAX_QUERY_LIMIT = 100
