"""Services Layer — imperative shell sequencing store calls around the pure core.

Invariants:
    - ClaimGraphService owns every mutation; ClaimQueryService never mutates
    - Services depend on the ClaimStore protocol, not on SQLAlchemy
"""
