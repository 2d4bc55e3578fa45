"""
FastAPI application setup with middleware and configuration.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import time

from ocr_records import __version__
from ocr_records.config import get_settings
from ocr_records.observability.logging import setup_logging, bind_request_context, get_logger
from ocr_records.observability.metrics import get_metrics
from ocr_records.errors import (
    MissingImageError,
    OCRRecordsError,
    PersistenceError,
    ProcessingError,
    ValidationError,
)
from ocr_records.api.routes import records, health
from ocr_records.services import Services


def _public_error(exc: OCRRecordsError) -> str:
    """Summary shown to clients for server-side failures."""
    if isinstance(exc, ProcessingError):
        return "Failed to process image"
    if isinstance(exc, PersistenceError):
        return "Record store unavailable"
    return "Something went wrong!"


def create_app(
    settings=None,
    store=None,
    recognizer=None,
    preprocessor=None
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Collaborators not passed in are built from settings.
    """
    settings = settings or get_settings()
    services = Services.build(
        settings,
        store=store,
        recognizer=recognizer,
        preprocessor=preprocessor
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        setup_logging(settings)
        logger = get_logger(__name__)
        logger.info(
            "application_startup",
            version=__version__,
            store=services.store.backend,
            engine=services.recognizer.name,
            upload_dir=str(services.images.upload_dir)
        )

        yield

        services.store.close()
        logger.info("application_shutdown")

    app = FastAPI(
        title="OCR Records API",
        description="Upload images, extract their text and manage the saved records",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        request_id = bind_request_context()

        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time

        logger = get_logger(__name__)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Processing-Time"] = str(round(duration * 1000, 2))

        return response

    # Metrics middleware
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        metrics = get_metrics()
        metrics.active_requests.inc()

        try:
            response = await call_next(request)
            return response
        finally:
            metrics.active_requests.dec()

    @app.exception_handler(OCRRecordsError)
    async def records_error_handler(request: Request, exc: OCRRecordsError):
        logger = get_logger(__name__)

        if exc.status_code < 500:
            logger.info(
                "request_rejected",
                error=exc.message,
                error_type=type(exc).__name__,
                status_code=exc.status_code
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "success": False,
                    "error": exc.message,
                    "error_type": type(exc).__name__
                }
            )

        logger.error(
            "request_failed",
            error=exc.message,
            error_type=type(exc).__name__,
            details=exc.details
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": _public_error(exc),
                "error_type": type(exc).__name__,
                "details": exc.message
            }
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        # A form field named "image" that is not a file counts as no file
        if any(tuple(err.get("loc", ()))[:2] == ("body", "image") for err in errors):
            error = MissingImageError()
        else:
            error = ValidationError(errors[0].get("msg", "Invalid request") if errors else "Invalid request")
        return await records_error_handler(request, error)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger = get_logger(__name__)
        logger.exception("unhandled_exception", error=str(exc))

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Something went wrong!",
                "error_type": "InternalServerError",
                "details": str(exc)
            }
        )

    # Include routers
    app.include_router(records.router, prefix="/api", tags=["Records"])
    app.include_router(health.router, tags=["Health"])

    # Uploaded images, read-only
    app.mount(
        settings.static_url_prefix,
        StaticFiles(directory=services.images.upload_dir),
        name="uploads"
    )

    return app
