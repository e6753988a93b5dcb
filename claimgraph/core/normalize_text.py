"""Claim Normalization — canonical token string used as a claim's identity key.

Invariants:
    - Pure and deterministic: same input always yields the same output
    - Steps run in fixed order: lowercase, strip punctuation, split, stem, join
    - Output tokens are separated by exactly one space; empty input -> ""
    - Idempotent: each token is stemmed to a fixpoint, so
      normalize_claim(normalize_claim(x)) == normalize_claim(x)

Design Decisions:
    - Porter stemmer from NLTK, built once at import: it holds no mutable state,
      so a single module-level instance is shared by every caller
    - Only the fixed punctuation set . , ! ? ; : ( ) is stripped; other symbols
      (apostrophes, hyphens) stay inside their token
"""

import re

from nltk.stem.porter import PorterStemmer

_PUNCTUATION = re.compile(r"[.,!?;:()]")
_STEMMER = PorterStemmer()
_MAX_STEM_PASSES = 8


def _stem(token: str) -> str:
    """Re-stem until the token stops changing: agreed -> agre -> agr."""
    for _ in range(_MAX_STEM_PASSES):
        stemmed = _STEMMER.stem(token)
        if stemmed == token:
            break
        token = stemmed
    return token


def normalize_claim(text: str) -> str:
    """Lowercase, strip punctuation, stem each whitespace token, rejoin."""
    lowered = text.lower()
    stripped = _PUNCTUATION.sub("", lowered)
    return " ".join(_stem(token) for token in stripped.split())


def tokenize_normalized(normalized: str) -> set[str]:
    """Token set of an already-normalized string."""
    return set(normalized.split())
