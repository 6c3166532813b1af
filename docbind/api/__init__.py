"""API Layer: FastAPI adapter, routes and error handlers.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - All endpoints return envelope-shaped JSON responses
"""
