import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict, cast

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse
from pythonjsonlogger.json import JsonFormatter
from starlette.middleware.cors import CORSMiddleware

from eventhub.core.database_manager import db_manager
from eventhub.core.errors import DomainError, MissingFieldsError, http_status_for
from eventhub.core.settings import get_settings
from eventhub.middleware.monitoring import (
    MonitoringMiddleware,
    get_health_status,
    get_prometheus_metrics,
)
from eventhub.redis import close_redis

from .api.api import api_router
from .api.openapi_tags import SECURED_TAGS, security_schemes, tags_metadata

settings = get_settings()

# Configure structured logging
log_handler = logging.StreamHandler()
formatter = JsonFormatter(
    "%(levelname)s %(asctime)s %(message)s %(name)s %(processName)s %(filename)s %(lineno)d",
    rename_fields={"levelname": "level", "asctime": "time", "name": "loggerName"},
)
log_handler.setFormatter(formatter)
logging.basicConfig(handlers=[log_handler], level=settings.monitoring.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")

    db_health = await db_manager.health_check()
    if db_health.get("status") == "healthy":
        logger.info("Database connection verified")
    else:
        logger.warning(f"Database health check failed: {db_health.get('message')}")

    yield

    logger.info("Shutting down")
    await close_redis()
    await db_manager.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    **EventHub** lists events, takes attendee registrations and gives
    administrators a dashboard to manage both.

    ## Features

    * **Event Catalog**: search, category filter and paging
    * **Registrations**: validated sign-up with free or paid tickets
    * **Admin Dashboard**: event and registration management, stats, CSV export
    * **Contact**: messages forwarded to the support inbox

    ## Authentication

    Admin endpoints require a bearer token:

    ```
    Authorization: Bearer <your_jwt_token>
    ```

    Get a token from the `/api/v1/auth/login` endpoint.
    """,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

app.add_middleware(MonitoringMiddleware)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(DomainError)  # type: ignore[misc]
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = http_status_for(exc.code)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "Domain error on %s: %s",
        request.url.path,
        exc,
        extra={"error_code": exc.code.value, "status_code": status_code},
    )
    content: Dict[str, Any] = {"detail": exc.message, "error_code": exc.code.value}
    if isinstance(exc, MissingFieldsError):
        content["fields"] = exc.fields
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(HTTPException)  # type: ignore[misc]
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    logger.warning(
        "HTTPException occurred: %s",
        exc.detail,
        extra={"status_code": exc.status_code},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(Exception)  # type: ignore[misc]
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception occurred: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


def custom_openapi() -> Dict[str, Any]:
    """OpenAPI schema with bearer auth on admin operations"""
    if app.openapi_schema:
        return cast(Dict[str, Any], app.openapi_schema)

    from fastapi.openapi.utils import get_openapi

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=tags_metadata,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = security_schemes

    for path_item in openapi_schema["paths"].values():
        for method_item in path_item.values():
            if isinstance(method_item, dict) and SECURED_TAGS.intersection(
                method_item.get("tags", [])
            ):
                method_item["security"] = [{"BearerAuth": []}]

    app.openapi_schema = openapi_schema
    return cast(Dict[str, Any], app.openapi_schema)


app.openapi = custom_openapi  # type: ignore[method-assign]


@app.get("/", tags=["Root"], summary="API Welcome Message")  # type: ignore[misc]
async def root() -> dict[str, Any]:
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": f"{settings.API_V1_PREFIX}/docs",
        "redoc": f"{settings.API_V1_PREFIX}/redoc",
        "openapi": f"{settings.API_V1_PREFIX}/openapi.json",
    }


@app.get("/health", tags=["Health"], summary="Health Check")  # type: ignore[misc]
async def health_check() -> JSONResponse:
    """
    Health of the database and Redis.

    Returns `503` when the database is unreachable.
    """
    result = await get_health_status()
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE
        if result["status"] == "unhealthy"
        else status.HTTP_200_OK
    )
    return JSONResponse(status_code=status_code, content=result)


@app.get("/metrics", tags=["Monitoring"], summary="Prometheus Metrics")  # type: ignore[misc]
async def metrics() -> PlainTextResponse:
    """Prometheus metrics in exposition format."""
    if not settings.monitoring.ENABLE_PROMETHEUS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Metrics endpoint is disabled"
        )

    metrics_data = await get_prometheus_metrics()
    return PlainTextResponse(
        content=metrics_data, media_type="text/plain; version=0.0.4; charset=utf-8"
    )
