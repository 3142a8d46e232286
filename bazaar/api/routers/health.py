"""
Health Check Endpoints
Liveness and detailed status.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth.session import SessionProvider
from ..config import APISettings, get_settings
from ..dependencies import get_db, get_session_provider
from ..middleware.timing import get_latency_tracker

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    """Basic health check."""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/status", status_code=status.HTTP_200_OK)
async def status_check(
    settings: APISettings = Depends(get_settings),
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
) -> Dict[str, Any]:
    """
    Detailed status check.

    Checks the database connection and reports session subscribers and
    request latency against the p95 target.
    """
    status_info: Dict[str, Any] = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "environment": settings.environment,
        "components": {},
    }

    try:
        db.execute(text("SELECT 1"))
        status_info["components"]["database"] = {
            "status": "healthy",
            "url": settings.database_url.split("@")[-1],  # Hide credentials
        }
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        status_info["components"]["database"] = {"status": "unhealthy", "error": str(e)}
        status_info["status"] = "degraded"

    status_info["components"]["sessions"] = {
        "status": "healthy",
        "listeners": provider.listener_count,
    }

    latency_stats = get_latency_tracker().get_stats()
    status_info["performance"] = {
        "request_count": latency_stats["count"],
        "latency_p50_ms": round(latency_stats["p50"], 2),
        "latency_p95_ms": round(latency_stats["p95"], 2),
        "latency_p99_ms": round(latency_stats["p99"], 2),
        "target_p95_ms": settings.target_p95_latency_ms,
        "meets_target": latency_stats["p95"] <= settings.target_p95_latency_ms,
    }

    return status_info
