"""
Request monitoring middleware
Provides request tracing, structured request logs and Prometheus metrics.
"""

import logging
import time
import traceback
import uuid
from typing import Any, Callable, Dict

import structlog
from fastapi import Request, Response
from prometheus_client import Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from eventhub.core.settings import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        (
            structlog.processors.JSONRenderer()
            if settings.monitoring.LOG_FORMAT == "json"
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

struct_logger = structlog.get_logger()


class PrometheusMetrics:
    """Prometheus metrics collection"""

    def __init__(self) -> None:
        # HTTP metrics
        self.http_requests_total = Counter(
            "eventhub_http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
        )

        self.http_request_duration_seconds = Histogram(
            "eventhub_http_request_duration_seconds",
            "HTTP request latency",
            ["method", "endpoint"],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.active_requests = Gauge(
            "eventhub_active_requests", "Number of requests in flight"
        )

        self.errors_total = Counter(
            "eventhub_errors_total",
            "Total unhandled application errors",
            ["error_type", "endpoint"],
        )

        # Business metrics
        self.registrations_total = Counter(
            "eventhub_registrations_total",
            "Total attendee registrations",
            ["ticket_type"],
        )

        self.events_created_total = Counter(
            "eventhub_events_created_total", "Total events created"
        )

        self.contact_messages_total = Counter(
            "eventhub_contact_messages_total",
            "Contact form messages by outcome",
            ["status"],
        )

    def record_request(
        self, method: str, endpoint: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics"""
        self.http_requests_total.labels(
            method=method, endpoint=endpoint, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(
            method=method, endpoint=endpoint
        ).observe(duration)

    def record_error(self, error_type: str, endpoint: str) -> None:
        self.errors_total.labels(error_type=error_type, endpoint=endpoint).inc()


# Collectors register globally, so there is exactly one instance per process.
metrics = PrometheusMetrics()


def get_client_ip(request: Request) -> str:
    """Extract client IP address"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return str(forwarded.split(",")[0].strip())

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return str(real_ip.strip())

    return str(request.client.host) if request.client else "unknown"


def _route_template(request: Request) -> str:
    # Label by route template so ids do not explode metric cardinality
    route = request.scope.get("route")
    return str(getattr(route, "path", request.url.path))


class MonitoringMiddleware(BaseHTTPMiddleware):
    """
    Monitoring middleware providing request ids, structured request logs
    and Prometheus metrics.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        client_ip = get_client_ip(request)

        struct_logger.info(
            "request_started",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip,
        )

        start_time = time.time()
        metrics.active_requests.inc()
        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            metrics.record_error(e.__class__.__name__, _route_template(request))
            struct_logger.error(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                duration=duration,
                error=str(e),
                error_type=e.__class__.__name__,
                traceback=traceback.format_exc(),
                client_ip=client_ip,
            )
            raise
        finally:
            metrics.active_requests.dec()

        duration = time.time() - start_time
        metrics.record_request(
            request.method, _route_template(request), response.status_code, duration
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        struct_logger.info(
            "request_completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration=duration,
            client_ip=client_ip,
        )
        return response


async def get_health_status() -> Dict[str, Any]:
    """Health of the database and Redis"""
    from eventhub.core.database_manager import db_manager
    from eventhub.redis import redis_health_check

    db_health = await db_manager.health_check()
    redis_health = await redis_health_check()

    overall_status = "healthy"
    if db_health.get("status") != "healthy":
        overall_status = "unhealthy"
    elif redis_health.get("status") != "healthy":
        overall_status = "degraded"

    return {
        "status": overall_status,
        "system": {
            "timestamp": time.time(),
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
        },
        "database": db_health,
        "redis": redis_health,
    }


async def get_prometheus_metrics() -> str:
    """Get Prometheus metrics"""
    return str(generate_latest().decode("utf-8"))
