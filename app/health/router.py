"""Health domain router.

Health check endpoints for monitoring, load balancers and orchestrator probes.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlmodel import Session

from app.core.constants import Routes
from app.core.deps import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])


def _database_ok(session: Session) -> bool:
    try:
        session.exec(text("SELECT 1"))
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True


@router.get("")
async def health(session: SessionDep):
    """Health check endpoint with database connectivity verification."""
    if _database_ok(session):
        return {"status": "ok", "database": "ok"}
    return JSONResponse(
        status_code=503,
        content={"status": "unhealthy", "database": "error"},
    )


@router.get("/liveness")
async def liveness():
    """Process is up. Never touches the database."""
    return {"status": "ok"}


@router.get("/readiness")
async def readiness(session: SessionDep):
    """Ready to serve traffic once the database answers."""
    if _database_ok(session):
        return {"status": "ready", "database": "ok"}
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "database": "error"},
    )
