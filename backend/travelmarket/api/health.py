"""
Health and database statistics endpoints
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)
router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


@router.get("/")
def health_check():
    return {"status": "API active", "version": API_VERSION}


@router.get("/health",
    responses={
        200: {"description": "Service and database are healthy"},
        503: {"description": "Database is unhealthy"}
    },
    summary="Detailed health check",
)
async def health_check_detailed(request: Request):
    db_health = await request.app.state.db.health_check()
    healthy = db_health["status"] == "healthy"
    if not healthy:
        logger.warning("health_check_degraded", error=db_health.get("error"))

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "degraded",
            "version": API_VERSION,
            "components": {
                "database": db_health["status"],
                "sessions": {
                    "active": len(request.app.state.sessions),
                    "sweeper_running": request.app.state.sessions.running,
                },
                "api": "healthy",
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get("/api/database/stats", summary="Database connection statistics")
async def get_database_statistics(request: Request):
    stats = request.app.state.db.get_connection_stats()
    stats["error_rate"] = (
        stats["failed_connections"] / max(stats["total_connections"], 1) * 100
    )
    return stats
