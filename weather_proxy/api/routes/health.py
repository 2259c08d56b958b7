from __future__ import annotations

from fastapi import APIRouter

from weather_proxy.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems. Reports whether the
    upstream API key is configured without revealing it.

    Returns:
        dict: ``status`` set to "ok" and a ``weather_api_configured`` flag.
    """

    return {
        "status": "ok",
        "weather_api_configured": bool(settings.weather.api_key),
    }
