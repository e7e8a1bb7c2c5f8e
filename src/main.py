"""FastAPI application entry point for LedgerLens."""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.middleware.error_handler import (
    HANDLED_EXCEPTIONS,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from src.api.middleware.logging import StructuredLoggingMiddleware
from src.api.routes.accounts import router as accounts_router
from src.api.routes.billing import router as billing_router
from src.api.routes.geo_risk import router as geo_risk_router
from src.api.routes.health import router as health_router
from src.api.routes.notifications import router as notifications_router
from src.api.routes.relay import router as relay_router
from src.api.routes.settings import router as settings_router
from src.api.routes.transactions import router as transactions_router
from src.config import settings
from src.shared.logging import setup_logging

logger = structlog.get_logger()

# Track app start time for uptime calculation
APP_START_TIME: float = 0.0

CORS_ALLOW_HEADERS = [
    "authorization",
    "x-client-info",
    "apikey",
    "content-type",
    "x-relay-key",
    "x-request-id",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown logic."""
    global APP_START_TIME
    APP_START_TIME = time.time()
    setup_logging(settings.log_level)

    logger.info(
        "ledgerlens_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    if settings.db_create_all:
        from src.db.database import init_db

        await init_db()

    yield

    from src.db.database import engine

    await engine.dispose()
    logger.info("ledgerlens_shutting_down")


app = FastAPI(
    title="LedgerLens",
    description="AML monitoring backend for blockchain transactions",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials="*" not in settings.cors_allow_origins,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
    expose_headers=["X-Request-ID", "Content-Disposition"],
)

# Structured logging middleware
app.add_middleware(StructuredLoggingMiddleware)

# Exception handlers
for exc_class in HANDLED_EXCEPTIONS:
    app.add_exception_handler(exc_class, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Register routers
app.include_router(health_router)
app.include_router(relay_router)
app.include_router(geo_risk_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(billing_router)
app.include_router(settings_router)
app.include_router(notifications_router)


def get_uptime() -> int:
    """Get application uptime in seconds."""
    if APP_START_TIME == 0.0:
        return 0
    return int(time.time() - APP_START_TIME)


def run() -> None:
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
