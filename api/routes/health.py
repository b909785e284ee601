"""Health check API routes.

Provides endpoints for:
- GET /health - Basic liveness check
- GET /health/ready - Readiness check (DB connectivity)
"""

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text

from api.routes.v1.dependencies import SessionDep
from unlingo.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict:
    """Basic liveness check.

    Returns 200 if the service is running.
    No authentication required.
    """
    return {"status": "ok"}


@router.get("/ready")
async def ready(session: SessionDep) -> dict:
    """Readiness check.

    Raises:
        HTTPException 503: Database unavailable
    """
    try:
        session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("readiness_check_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready: database unavailable",
        )
    return {"status": "ok", "database": True}
