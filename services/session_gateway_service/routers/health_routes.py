"""Health and metrics routes for Session Gateway Service."""

from __future__ import annotations

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.config import Settings

router = APIRouter(tags=["Health"])
logger = create_service_logger("session_gateway_service.routers.health")


@router.get("/healthz")
@inject
async def health_check(config: FromDishka[Settings]) -> dict[str, str | dict]:
    """Liveness check. Downstream availability is only checked on request."""
    logger.debug("Health check requested")
    return {
        "service": "session_gateway_service",
        "status": "healthy",
        "message": "Session Gateway Service is healthy",
        "version": "1.0.0",
        "dependencies": {
            "identity_service": {"url": config.IDENTITY_SERVICE_URL, "note": "Checked per request"},
            "file_storage_service": {"url": config.FILE_STORAGE_URL, "note": "Checked per request"},
        },
        "environment": config.ENVIRONMENT.value,
    }


@router.get("/metrics", response_class=PlainTextResponse)
@inject
async def metrics(registry: FromDishka[CollectorRegistry]):
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return PlainTextResponse(content="Error generating metrics", status_code=500)
