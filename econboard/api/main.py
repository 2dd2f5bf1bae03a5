"""FastAPI application entry point for econboard.

Health check with DB connectivity, version endpoint, and one resource per
record kind. Record errors map to HTTP responses here:
RecordValidationError -> 422, RecordNotFoundError -> 404,
StorageError -> 503.
"""

import logging

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from econboard.api.records import routers as record_routers
from econboard.config.settings import get_settings
from econboard.errors import RecordNotFoundError, RecordValidationError, StorageError

APP_VERSION = "0.1.0"

settings = get_settings()

_LOG_NAME_TO_LEVEL: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# --- Structured logging ---
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if settings.ENVIRONMENT == "dev"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value],
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

# Module loggers (gateway, wizards) use the stdlib.
logging.basicConfig(level=_LOG_NAME_TO_LEVEL[settings.LOG_LEVEL.value])

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

# --- FastAPI app ---
app = FastAPI(
    title="econboard API",
    description="National economic indicator entry with share validation.",
    version=APP_VERSION,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)

# --- CORS middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping ---


@app.exception_handler(RecordValidationError)
async def handle_validation_error(request: Request, exc: RecordValidationError) -> JSONResponse:
    logger.info("record_rejected", path=request.url.path, kinds=sorted(exc.kinds))
    return JSONResponse(
        status_code=422,
        content={
            "detail": str(exc),
            "violations": [v.as_dict() for v in exc.violations],
        },
    )


@app.exception_handler(RecordNotFoundError)
async def handle_not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StorageError)
async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("storage_failure", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"detail": "The record could not be saved or loaded. Please try again."},
    )


# --- Routers ---
for router in record_routers:
    app.include_router(router)


# --- Infrastructure Endpoints ---


@app.get("/health")
async def health_check() -> dict:
    """Liveness probe with component health checks.

    Returns 200 always (degraded status if components are down).
    """
    checks: dict[str, bool] = {"api": True}

    try:
        from econboard.db.session import async_session_factory
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception:
        checks["database"] = False

    all_ok = all(checks.values())

    return {
        "status": "ok" if all_ok else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
        "checks": checks,
    }


@app.get("/api/version")
async def get_version() -> dict[str, str]:
    """Return application name, version, and environment."""
    return {
        "name": "econboard",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT.value,
    }
