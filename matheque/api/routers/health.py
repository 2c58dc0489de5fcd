"""Health check endpoints."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from matheque.api.deps import get_database

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "matheque"
    }

@router.get("/live")
def liveness_check():
    """Liveness probe endpoint."""
    return {"status": "alive"}

@router.get("/ready")
def readiness_check(db: Session = Depends(get_database)):
    """Readiness probe: the database answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail="database unavailable")
    return {"status": "ready"}
