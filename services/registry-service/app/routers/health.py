from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
import time
import structlog

from ..models.schemas import HealthCheckResponse, MetricsResponse
from ..models.records import KINDS
from ..core.config import settings
from ..models.database import get_db
from ..services.record_store import RecordStore, RecordStoreError

logger = structlog.get_logger()
router = APIRouter(prefix="/health", tags=["health"])

# Store service start time for uptime calculation
SERVICE_START_TIME = time.time()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Checks:
    - Service status
    - Database connectivity
    - Service uptime
    """
    database_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        database_status = f"unhealthy: {str(e)}"
        logger.error("Database health check failed", error=str(e))

    return HealthCheckResponse(
        status="healthy" if database_status == "healthy" else "degraded",
        version=settings.APP_VERSION,
        database_status=database_status,
        uptime_seconds=time.time() - SERVICE_START_TIME
    )


@router.get("/live")
async def liveness_probe():
    """
    Kubernetes liveness probe endpoint.
    Simple check to verify the service is running.
    """
    return {"status": "alive", "timestamp": datetime.now().isoformat()}


@router.get("/ready")
async def readiness_probe(db: AsyncSession = Depends(get_db)):
    """
    Kubernetes readiness probe endpoint.
    Checks if the service is ready to handle requests.
    """
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ready", "timestamp": datetime.now().isoformat()}
    except Exception as e:
        logger.error("Readiness probe failed", error=str(e))
        raise HTTPException(status_code=503, detail="Service not ready")


@router.get("/metrics", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    """
    Record counts for monitoring.

    A kind that cannot be counted reports 0 and is listed under ``errors``.
    """
    records_by_kind = {}
    errors = []

    for kind in KINDS:
        try:
            records_by_kind[kind.name] = await RecordStore(db, kind).count()
        except RecordStoreError as e:
            records_by_kind[kind.name] = 0
            errors.append(f"{kind.name}: {e.message}")

    return MetricsResponse(
        total_records=sum(records_by_kind.values()),
        records_by_kind=records_by_kind,
        errors=errors
    )


@router.get("/version")
async def get_version():
    """Get service version information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_prefix": settings.API_PREFIX,
        "build_time": datetime.now().isoformat()
    }
