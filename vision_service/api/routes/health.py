"""
Health and metrics API routes.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from vision_service.monitoring import get_health_info, get_metrics
from vision_service.telemetry import HEALTH_CHECK_SPAN

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Liveness check: always 200 while the listener is serving."""
    config = request.app.state.config
    telemetry = request.app.state.telemetry

    with telemetry.span(HEALTH_CHECK_SPAN, {"http.route": "/health"}):
        telemetry.record_health_check({"format": config.health_format})
        body = get_health_info(config.health_format)

    if isinstance(body, str):
        return PlainTextResponse(body)
    return JSONResponse(content=body)


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)
