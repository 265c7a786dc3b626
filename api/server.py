"""
Load calendar API server - heatmap reads and load ingestion over REST.

Usage:
    uvicorn api.server:app            # settings from the environment
    python cli.py serve --port 8080

Tests build their own app with create_app(settings).
"""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.capacity_router import capacity_router
from api.entity_router import entity_router
from api.heatmap_router import heatmap_router
from api.load_router import load_router
from api.response_models import HealthResponse
from loadcal import __version__
from loadcal.app_services import Services, build_services
from loadcal.config import Settings
from loadcal.errors import (
    ConflictError,
    LoadCalError,
    NotFoundError,
    QueryCancelledError,
    QueryTimeoutError,
    StoreError,
    ValidationError,
)
from loadcal.observability import CorrelationIdMiddleware, configure_logging

logger = logging.getLogger(__name__)

# Non-standard "client closed request"
STATUS_CLIENT_CLOSED = 499

_STATUS_BY_ERROR: list[tuple[type[LoadCalError], int]] = [
    (NotFoundError, 404),
    (ValidationError, 400),
    (ConflictError, 409),
    (QueryCancelledError, STATUS_CLIENT_CLOSED),
    (QueryTimeoutError, 504),
    (StoreError, 503),
]


def status_for(exc: LoadCalError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def _error_body(message: str, error_code: str, **extra) -> dict:
    return {"error": message, "error_code": error_code, **extra}


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(LoadCalError)
    async def handle_loadcal_error(request: Request, exc: LoadCalError):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
            # Store messages carry only the operation name, never SQL
        elif status != STATUS_CLIENT_CLOSED:
            logger.info("%s %s -> %d: %s", request.method, request.url.path, status, exc)
        return JSONResponse(status_code=status, content=_error_body(str(exc), exc.error_code))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", [])), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=_error_body("request validation failed", ValidationError.error_code, details=details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = {401: "unauthorized", 404: "not_found", 405: "method_not_allowed"}.get(exc.status_code, "http_error")
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail), code),
            headers=getattr(exc, "headers", None),
        )


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """
    Build the FastAPI app.

    The lifespan converges the schema on startup and drains queued overload
    alerts on shutdown.
    """
    settings = settings or (services.settings if services else Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_services = services or build_services(settings)
        app.state.services = app_services
        logger.info("=== Load calendar startup ===")
        logger.info("DB path: %s", app_services.store.db_path)
        result = app_services.store.converge()
        logger.info("DB schema version: %s", result["schema_version"])
        if not settings.api_key:
            logger.warning("LOADCAL_API_KEY not set - mutating endpoints are unauthenticated")
        try:
            yield
        finally:
            logger.info("Shutting down, draining queued alerts")
            app_services.shutdown(wait=True)

    app = FastAPI(
        title="Load Calendar API",
        description="Workload vs. capacity heatmaps for people and groups",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    def health(request: Request):
        app_services: Services = request.app.state.services
        try:
            row = app_services.store.query_one("PRAGMA user_version", operation="health")
            schema_version = row["user_version"] if row else None
            status = "healthy"
        except StoreError as e:
            logger.error("Health check failed: %s", e)
            schema_version = None
            status = "unhealthy"
        return {
            "status": status,
            "version": __version__,
            "schema_version": schema_version,
            "alerts_enabled": app_services.dispatcher.enabled,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    app.include_router(entity_router, prefix="/api")
    app.include_router(capacity_router, prefix="/api")
    app.include_router(heatmap_router, prefix="/api")
    app.include_router(load_router, prefix="/api")

    return app


def __getattr__(name: str):
    # `uvicorn api.server:app` builds the app from the environment on first access
    if name == "app":
        settings = Settings.from_env()
        configure_logging(settings.log_level, settings.log_json)
        application = create_app(settings)
        globals()["app"] = application
        return application
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
