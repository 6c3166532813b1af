"""Database Infrastructure: SQLAlchemy Base for the reference document store.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)
"""
