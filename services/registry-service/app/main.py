from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import time
import structlog
from contextlib import asynccontextmanager

from .core.config import settings
from .core.logging import configure_logging
from .routers import health, records
from .models.database import init_database
from .models.records import KINDS
from .utils.monitoring import (
    METRICS_CONTENT_TYPE,
    get_prometheus_metrics,
    setup_prometheus_metrics,
    track_request_metrics
)

# Configure structured logging
configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Blood Bank Registry Service", version=settings.APP_VERSION)

    # Initialize database
    await init_database()

    # Setup monitoring
    if settings.ENABLE_METRICS:
        setup_prometheus_metrics()

    logger.info("Service startup completed")

    yield

    # Shutdown
    logger.info("Shutting down Blood Bank Registry Service")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Record-keeping API for blood types, hospitals, donors, recipients and transactions",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    start_time = time.time()

    logger.info(
        "Request started",
        method=request.method,
        url=str(request.url),
        client=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

    try:
        response = await call_next(request)

        process_time = time.time() - start_time

        logger.info(
            "Request completed",
            method=request.method,
            url=str(request.url),
            status_code=response.status_code,
            process_time=process_time
        )

        if settings.ENABLE_METRICS:
            track_request_metrics(request, response, process_time)

        response.headers["X-Process-Time"] = str(process_time)

        return response

    except Exception as e:
        process_time = time.time() - start_time
        logger.error(
            "Request failed",
            method=request.method,
            url=str(request.url),
            error=str(e),
            process_time=process_time
        )
        raise


# Global exception handler
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    logger.error(
        "HTTP exception",
        method=request.method,
        url=str(request.url),
        status_code=exc.status_code,
        detail=exc.detail
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "timestamp": time.time()
        },
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(
        "Unhandled exception",
        method=request.method,
        url=str(request.url),
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500,
            "timestamp": time.time()
        }
    )


# Include routers
app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(records.router, prefix=settings.API_PREFIX)


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "message": "Blood Bank API is running",
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
        "timestamp": time.time()
    }


# API information endpoint
@app.get(f"{settings.API_PREFIX}/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "api_prefix": settings.API_PREFIX,
        "environment": "development" if settings.DEBUG else "production",
        "features": {
            "health_checks": True,
            "record_updates": False,
            "record_deletes": False,
            "monitoring": settings.ENABLE_METRICS
        },
        "endpoints": [
            {
                "kind": kind.name,
                "path": f"{settings.API_PREFIX}/{kind.slug}",
                "methods": ["GET", "POST"],
                "key_field": kind.key_field,
                "fields": kind.field_names,
                "number_fields": kind.number_fields
            }
            for kind in KINDS
        ]
    }


# Prometheus exposition
@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    if not settings.ENABLE_METRICS:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(content=get_prometheus_metrics(), media_type=METRICS_CONTENT_TYPE)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
