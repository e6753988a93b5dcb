"""ClaimGraph — argument knowledge graph built from debate turns.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
