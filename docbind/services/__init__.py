"""Services Layer: the Resource orchestrator and its handler factories.

Invariants:
    - Operation kind -> handler factory uses an explicit dict (no auto-discovery)
"""
