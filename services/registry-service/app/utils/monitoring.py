from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Request, Response
import structlog

logger = structlog.get_logger()

# Prometheus metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

RECORDS_CREATED = Counter(
    'records_created_total',
    'Total records stored',
    ['kind']
)

STORE_ERRORS = Counter(
    'record_store_errors_total',
    'Total record store failures',
    ['kind', 'operation']
)

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST


def setup_prometheus_metrics():
    """Setup Prometheus metrics collection."""
    logger.info("Prometheus metrics enabled")


def track_request_metrics(request: Request, response: Response, process_time: float):
    """Track request metrics for Prometheus."""
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=request.url.path,
        status_code=response.status_code
    ).inc()

    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=request.url.path
    ).observe(process_time)


def track_record_created(kind: str):
    """Count a stored record."""
    RECORDS_CREATED.labels(kind=kind).inc()


def track_store_error(kind: str, operation: str):
    """Count a failed store operation."""
    STORE_ERRORS.labels(
        kind=kind,
        operation=operation
    ).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics in text format."""
    return generate_latest()
