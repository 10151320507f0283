# Health check endpoints for system monitoring

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from core.config import settings
from core.database import get_db_health

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "kindkandles-api"


class HealthStatus:
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@router.get("")
async def health_check():
    """
    Basic liveness check - returns 200 if the service is running.
    Reports whether the payment processor has credentials without contacting it.
    """
    return {
        "status": HealthStatus.HEALTHY,
        "service": SERVICE_NAME,
        "environment": settings.ENVIRONMENT,
        "payments_configured": settings.stripe_configured,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness check - 200 only when the database answers
    """
    db_health = await get_db_health()
    overall_status = HealthStatus.HEALTHY
    if db_health.get("status") != HealthStatus.HEALTHY:
        overall_status = HealthStatus.UNHEALTHY
    elif not settings.stripe_configured:
        overall_status = HealthStatus.DEGRADED

    response_data = {
        "status": overall_status,
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "database": db_health,
            "payments": {"configured": settings.stripe_configured},
        },
    }
    status_code = 503 if overall_status == HealthStatus.UNHEALTHY else 200
    return JSONResponse(content=response_data, status_code=status_code)
