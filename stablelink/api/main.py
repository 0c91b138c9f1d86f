"""
Main FastAPI application for the StableLink backend.
Configures the API server, error handlers and the background indexer.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import structlog

from stablelink.core.config import settings
from stablelink.core.database import init_database, close_database
from stablelink.core.exceptions import (
    StablelinkException,
    ValidationError,
    NotFoundError,
    AuthenticationError,
)
from stablelink.core.logging import setup_logging
from stablelink.api.schemas.common import HealthCheckResponse
from stablelink.api.routes import (
    invoices,
    public_invoices,
    organization,
    webhooks,
    withdrawals,
    indexer,
)


logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting StableLink API server", environment=settings.environment)

    await init_database()

    if settings.indexer_enabled:
        try:
            from stablelink.scheduler.poll_scheduler import get_poll_scheduler

            scheduler = await get_poll_scheduler()
            await scheduler.start()
            logger.info("Indexer scheduler started")
        except Exception as e:
            logger.error("Failed to start indexer scheduler", error=str(e))

    yield

    logger.info("Shutting down StableLink API server")

    try:
        if settings.indexer_enabled:
            from stablelink.scheduler.poll_scheduler import shutdown_poll_scheduler
            from stablelink.services.ledger_client import close_ledger_client

            await shutdown_poll_scheduler()
            await close_ledger_client()
            logger.info("Indexer scheduler stopped")
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))

    await close_database()


_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


async def stablelink_exception_handler(request: Request, exc: StablelinkException) -> JSONResponse:
    """Map domain exceptions onto HTTP responses."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error("Unhandled application error", path=request.url.path, error=exc.message)
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_code=exc.code,
            status_code=status_code
        )

    return JSONResponse(
        status_code=status_code,
        content={"error": exc.message, "error_code": exc.code, "details": exc.details or None}
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    setup_logging()

    app = FastAPI(
        title="StableLink API",
        description="Invoicing API backed by the InvoicePayments contract on Etherlink.",
        version=settings.app_version,
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(StablelinkException, stablelink_exception_handler)

    @app.get("/health", response_model=HealthCheckResponse, tags=["System"], summary="Health Check")
    async def health_check():
        return HealthCheckResponse()

    app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
    app.include_router(public_invoices.router, prefix="/api/public", tags=["Public"])
    app.include_router(organization.router, prefix="/api/organization", tags=["Organization"])
    app.include_router(webhooks.router, prefix="/api/webhooks", tags=["Webhooks"])
    app.include_router(withdrawals.router, prefix="/api/withdrawals", tags=["Withdrawals"])
    app.include_router(indexer.router, prefix="/api/indexer", tags=["Indexer"])

    logger.info("FastAPI application created successfully")
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "stablelink.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )
