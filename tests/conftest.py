"""Pytest configuration and fixtures shared across all test modules.

Environment variables are seeded before any application import so the
settings singleton is built with test values and no .env file is loaded.
"""

import os

# Set before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("WEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("WEATHER_BASE_URL", "https://weather.test/data/2.5")
os.environ.setdefault("APP_RATE_LIMIT_POINTS", "10")
os.environ.setdefault("APP_RATE_LIMIT_DURATION_SECONDS", "60")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable, Iterator

import httpx
import pytest
from fastapi.testclient import TestClient

from weather_proxy.adapters.weather.openweather_client import OpenWeatherMapClient
from weather_proxy.api.routes.weather import get_weather_service
from weather_proxy.core import rate_limit as rate_limit_module
from weather_proxy.main import app
from weather_proxy.services.weather_service import WeatherService

TEST_API_KEY = "test-weather-key"
TEST_BASE_URL = "https://weather.test/data/2.5"


class FakeUpstream:
    """Records provider requests and answers them with a configurable handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = self.default_handler

    @staticmethod
    def default_handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/find"):
            return httpx.Response(200, json={"count": 1, "list": [{"name": "London"}]})
        return httpx.Response(200, json={"name": "Somewhere", "main": {"temp": 21.5}})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond_with(self, status_code: int = 200, **kwargs: Any) -> None:
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def raise_error(self, exc: Exception) -> None:
        def _raise(request: httpx.Request) -> httpx.Response:
            raise exc

        self.handler = _raise


@pytest.fixture(autouse=True)
def fresh_rate_limiter() -> Iterator[None]:
    """Start every test with an empty limiter."""
    rate_limit_module.reset_rate_limiter()
    yield
    rate_limit_module.reset_rate_limiter()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def weather_client(upstream: FakeUpstream) -> OpenWeatherMapClient:
    return OpenWeatherMapClient(
        api_key=TEST_API_KEY,
        base_url=TEST_BASE_URL,
        transport=httpx.MockTransport(upstream),
    )


@pytest.fixture
def client(weather_client: OpenWeatherMapClient) -> Iterator[TestClient]:
    """Test client whose weather service talks to the fake upstream."""
    service = WeatherService(client=weather_client)
    app.dependency_overrides[get_weather_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_weather_service, None)
