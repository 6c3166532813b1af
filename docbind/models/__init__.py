"""ORM Models: SQLAlchemy declarative models for the reference document store.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata knows every table before create_all
"""

from docbind.models.document import DocumentRow  # noqa: F401
