"""Infrastructure Layer — database sessions, the claim store, and logging setup.

Invariants:
    - Store failures surface as core DatabaseError, never raw SQLAlchemy exceptions
"""
