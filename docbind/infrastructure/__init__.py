"""Infrastructure Layer: database sessions, the reference document store, logging.

Invariants:
    - Store errors are mapped to core/errors.py types before leaving this layer
"""
