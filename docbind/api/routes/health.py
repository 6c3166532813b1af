"""Health & Readiness Probes: liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the database is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import docbind.infrastructure.database as db_module
from docbind.core import envelope

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return envelope.ok({"status": "healthy", "service": "docbind"})


@router.get("/ready")
async def readiness_check():
    """Readiness probe: includes database connectivity."""
    manager = db_module.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=envelope.ok({"status": "not_ready", "reason": "database_unavailable"}),
        )
    return envelope.ok({"status": "ready", "checks": {"database": "healthy"}})
