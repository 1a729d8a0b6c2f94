"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rfp_intake.api.routes import router
from rfp_intake.config import get_settings
from rfp_intake.errors import (
    AccessDenied,
    AnalysisNotReady,
    AuthenticationError,
    DuplicateRecordError,
    ExtractionFailed,
    FileTooLarge,
    InvalidStateTransition,
    RfpIntakeError,
    RfpNotFound,
    UnsupportedFormat,
)
from rfp_intake.services.container import get_container
from rfp_intake.utils.logging import get_logger, setup_logging_from_settings

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[RfpIntakeError], int] = {
    AuthenticationError: 401,
    AccessDenied: 403,
    RfpNotFound: 404,
    InvalidStateTransition: 409,
    AnalysisNotReady: 409,
    DuplicateRecordError: 409,
    FileTooLarge: 413,
    UnsupportedFormat: 415,
    ExtractionFailed: 422,
}


def status_code_for(error: RfpIntakeError) -> int:
    """HTTP status for a domain error; the closest mapped base class wins."""
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


async def handle_domain_error(request: Request, exc: RfpIntakeError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Unhandled pipeline error", path=request.url.path, error=exc.message)
    else:
        logger.info("Request rejected", path=request.url.path, error=exc.error_code, status_code=status_code)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=exc.to_dict(), headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("Starting RFP Intake API")
    container = app.dependency_overrides.get(get_container, get_container)()
    container.init_schema()

    settings = container.settings
    if settings.run_workers_in_api:
        container.workers.start()

    yield

    if settings.run_workers_in_api:
        container.workers.stop(timeout=settings.worker_shutdown_timeout_seconds)
    logger.info("Shutting down RFP Intake API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application.
    """
    setup_logging_from_settings()
    settings = get_settings()

    app = FastAPI(
        title="RFP Intake API",
        description="RFP upload, text extraction and asynchronous LLM analysis",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RfpIntakeError, handle_domain_error)

    # Include routers
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "RFP Intake API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


# Create app instance for uvicorn
app = create_app()
