"""Core Layer: pure binding logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: stores and adapters do IO,
      core only translates, merges and shapes
"""
