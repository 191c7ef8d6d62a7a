"""
Application factory - creates and configures the FastAPI application.
"""
import logging
from typing import Optional

from fastapi import FastAPI

from vision_service import __version__
from vision_service.api.routes.health import router as health_router
from vision_service.config import Config
from vision_service.monitoring import MetricsMiddleware
from vision_service.telemetry import NullTelemetry, Telemetry

logger = logging.getLogger(__name__)


def create_app(config: Config, telemetry: Optional[Telemetry] = None) -> FastAPI:
    """Create the FastAPI app serving /health and /metrics."""
    telemetry = telemetry or NullTelemetry()

    app = FastAPI(
        title=config.service_name,
        description="Computer Vision Service for line detection",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.telemetry = telemetry

    app.add_middleware(MetricsMiddleware)
    app.include_router(health_router)
    telemetry.instrument_app(app)

    logger.debug(f"Application created (telemetry={telemetry.name})")
    return app
