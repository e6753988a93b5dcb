"""Similarity Engine — Jaccard overlap between normalized claim texts.

Invariants:
    - jaccard_similarity is symmetric and bounded 0.0–1.0
    - Identical non-empty inputs score 1.0; two empty inputs score 0.0
    - select_similar is PURE: no IO, candidates in -> matches out, order preserved

Design Decisions:
    - Token sets come from whitespace splitting of the normalized string, so
      stemming already collapsed inflections before comparison
    - Candidate fetching lives in the service layer; this module only scores
"""

from dataclasses import dataclass
from uuid import UUID

from claimgraph.core.normalize_text import tokenize_normalized


@dataclass(frozen=True)
class SimilarMatch:
    """A candidate claim that cleared the similarity threshold."""
    claim_id: UUID
    similarity: float


def jaccard_similarity(norm_a: str, norm_b: str) -> float:
    """|A ∩ B| / |A ∪ B| over whitespace tokens. 0.0 on empty union."""
    tokens_a = tokenize_normalized(norm_a)
    tokens_b = tokenize_normalized(norm_b)
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def select_similar(
    normalized: str,
    candidates: list[tuple[UUID, str]],
    threshold: float,
) -> list[SimilarMatch]:
    """Keep (claim_id, normalized_text) candidates scoring >= threshold."""
    matches = []
    for claim_id, candidate_text in candidates:
        score = jaccard_similarity(normalized, candidate_text)
        if score >= threshold:
            matches.append(SimilarMatch(claim_id=claim_id, similarity=score))
    return matches
