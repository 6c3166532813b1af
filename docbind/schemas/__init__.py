"""Pydantic Schemas: per-collection validation for the reference document store.

Invariants:
    - Schemas validate document fields only; id and version are the store's business
"""
