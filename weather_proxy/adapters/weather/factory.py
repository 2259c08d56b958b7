"""Factory pattern for creating weather client instances."""

import logging

from weather_proxy.adapters.weather.base import AbstractWeatherClient
from weather_proxy.adapters.weather.openweather_client import OpenWeatherMapClient
from weather_proxy.core.config import settings
from weather_proxy.core.errors import INTERNAL_ERROR_MESSAGE, ConfigurationAppError

logger = logging.getLogger(__name__)


def create_weather_client() -> AbstractWeatherClient:
    """Instantiate the weather client configured in settings.

    A missing API key does not prevent startup (health checks keep working);
    the client then fails each upstream call as an upstream error.

    Returns:
        AbstractWeatherClient: Configured weather client instance.

    Raises:
        ConfigurationAppError: If the configured provider is not supported.
    """
    provider = settings.weather.provider.lower()

    if provider == "openweathermap":
        if not settings.weather.api_key:
            logger.warning(
                "weather.api_key_missing",
                extra={"hint": "Set WEATHER_API_KEY to enable upstream calls"},
            )
        return OpenWeatherMapClient(
            api_key=settings.weather.api_key,
            base_url=settings.weather.base_url,
            units=settings.weather.units,
            search_type=settings.weather.search_type,
            timeout_seconds=settings.weather.timeout_seconds,
        )

    raise ConfigurationAppError(
        code="weather_unknown_provider",
        message=INTERNAL_ERROR_MESSAGE,
        details={"hint": f"Unknown weather provider: '{provider}'. Supported providers: openweathermap"},
    )
