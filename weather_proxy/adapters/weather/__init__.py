"""Weather provider adapter layer."""

from weather_proxy.adapters.weather.base import AbstractWeatherClient
from weather_proxy.adapters.weather.factory import create_weather_client
from weather_proxy.adapters.weather.openweather_client import OpenWeatherMapClient

__all__ = [
    "AbstractWeatherClient",
    "OpenWeatherMapClient",
    "create_weather_client",
]
