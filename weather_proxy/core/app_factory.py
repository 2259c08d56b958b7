"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from weather_proxy.api.routes import health_router, weather_router
from weather_proxy.core.config import settings
from weather_proxy.core.exception_handlers import setup_exception_handlers
from weather_proxy.core.logging import configure_logging
from weather_proxy.core.middleware import request_id_middleware

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Weather Proxy API",
        description=(
            "Rate-limited proxy to the OpenWeatherMap API. Looks up current "
            "conditions by coordinates or searches locations by name while "
            "keeping the provider API key on the server."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        openapi_tags=[
            {"name": "Weather", "description": "Weather lookups proxied to the provider."},
            {"name": "Health", "description": "Liveness checks."},
        ],
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(weather_router, prefix="/api")
    app.include_router(health_router)

    logger.info(
        "app.created",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_points": settings.app.rate_limit_points,
            "rate_limit_duration_s": settings.app.rate_limit_duration_seconds,
            "weather_provider": settings.weather.provider,
        },
    )

    return app
