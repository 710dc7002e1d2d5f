"""
tillprint HTTP service.

Exposes receipt printer discovery, connection, printing and receipt
formatting over a small FastAPI application.
"""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tillprint import __version__
from tillprint.api.routers import health_router, printers_router, receipts_router
from tillprint.constants import ServerConstants
from tillprint.services.printer_service import PrinterService
from tillprint.utils.config import TillprintSettings, get_settings
from tillprint.utils.errors import (
    TillprintError,
    generic_exception_handler,
    http_exception_handler,
    tillprint_exception_handler,
)
from tillprint.utils.logging_config import mask_sensitive_data, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager for startup/shutdown."""
    settings: TillprintSettings = app.state.settings
    setup_logging(settings.log_level, settings.log_file)
    logger = structlog.get_logger()

    logger.info("=" * 60)
    logger.info("Starting tillprint", version=__version__, environment=settings.environment)
    logger.info("=" * 60)
    logger.debug("Effective settings", settings=mask_sensitive_data(settings.model_dump()))

    if getattr(app.state, "printer_service", None) is None:
        app.state.printer_service = PrinterService.from_settings(settings)
    await app.state.printer_service.initialize()

    logger.info("tillprint startup complete")
    yield

    logger.info("Shutting down tillprint...")
    await app.state.printer_service.shutdown()
    logger.info("tillprint shutdown complete")


def create_application(
    settings: Optional[TillprintSettings] = None,
    printer_service: Optional[PrinterService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (default: global settings)
        printer_service: Pre-built service graph; built from settings on startup when None
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="tillprint API",
        description="Receipt printer discovery, connection and printing",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.printer_service = printer_service

    cors_origins = settings.cors_origins_list
    if settings.environment == "development":
        cors_origins.extend([
            "http://localhost:8081",
            "http://127.0.0.1:8081",
        ])
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    prefix = ServerConstants.API_PREFIX
    app.include_router(health_router, prefix=prefix, tags=["Health"])
    app.include_router(printers_router, prefix=f"{prefix}/printers", tags=["Printers"])
    app.include_router(receipts_router, prefix=f"{prefix}/receipts", tags=["Receipts"])

    app.add_exception_handler(TillprintError, tillprint_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger = structlog.get_logger()
        logger.warning("Validation error", errors=exc.errors(), path=request.url.path)

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "status": "error",
                "message": "Request validation failed",
                "error_code": "VALIDATION_ERROR",
                "details": {"validation_errors": jsonable_errors(exc)},
                "timestamp": datetime.now().isoformat()
            }
        )

    app.add_exception_handler(Exception, generic_exception_handler)

    return app


def jsonable_errors(exc: RequestValidationError):
    """Validation errors with non-serializable context stringified."""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        error.pop("input", None)
        errors.append(error)
    return errors


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "tillprint.main:create_application",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level,
    )
