from __future__ import annotations

from weather_proxy.api.routes.health import router as health_router
from weather_proxy.api.routes.weather import router as weather_router

__all__ = ["health_router", "weather_router"]
