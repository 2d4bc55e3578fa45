"""
Health, metadata and metrics endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from ocr_records import __version__
from ocr_records.api.dependencies import get_services
from ocr_records.api.schemas import (
    HealthResponse,
    LanguageListResponse,
    LanguageResponse,
    ReadinessResponse,
)
from ocr_records.recognition import SUPPORTED_LANGUAGES
from ocr_records.services import Services

router = APIRouter()


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Simple liveness probe."
)
async def health_check():
    """Basic health check."""
    return HealthResponse(
        message="OCR API is running",
        timestamp=datetime.now(timezone.utc).isoformat()
    )


@router.get(
    "/api/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness Check",
    description="Check if the record store and OCR engine are usable."
)
def readiness_check(services: Services = Depends(get_services)):
    """Readiness check with dependency status."""
    components = {}
    overall_status = "healthy"

    if services.store.ping():
        components["record_store"] = {"status": "healthy", "backend": services.store.backend}
    else:
        components["record_store"] = {"status": "unhealthy", "backend": services.store.backend}
        overall_status = "unhealthy"

    if services.recognizer.is_available():
        components["recognizer"] = {"status": "healthy", "engine": services.recognizer.name}
    else:
        components["recognizer"] = {"status": "unhealthy", "engine": services.recognizer.name}
        if overall_status == "healthy":
            overall_status = "degraded"

    return ReadinessResponse(
        status=overall_status,
        version=__version__,
        components=components
    )


@router.get(
    "/api/languages",
    response_model=LanguageListResponse,
    summary="Supported Languages"
)
async def languages(services: Services = Depends(get_services)):
    return LanguageListResponse(
        default=services.pipeline.settings.default_language,
        languages=[LanguageResponse(code=code, name=name) for code, name in SUPPORTED_LANGUAGES.items()]
    )


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Prometheus-format metrics for monitoring."
)
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
