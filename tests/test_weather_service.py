"""Tests for weather query parsing and the weather service."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from weather_proxy.adapters.weather.base import AbstractWeatherClient
from weather_proxy.core.errors import UpstreamAppError, ValidationAppError
from weather_proxy.schemas.weather import CitySearchQuery, CoordinatesQuery
from weather_proxy.services.weather_service import WeatherService, parse_weather_query


class StubWeatherClient(AbstractWeatherClient):
    """In-memory client recording calls."""

    def __init__(self, current: dict[str, Any] | None = None, found: dict[str, Any] | None = None) -> None:
        self.current_by_coordinates = AsyncMock(return_value=current or {"name": "Here"})
        self.find_by_name = AsyncMock(return_value=found if found is not None else {"list": []})

    @property
    def is_configured(self) -> bool:
        return True

    async def current_by_coordinates(self, lat: float, lon: float) -> dict[str, Any]:  # pragma: no cover - replaced per instance
        raise NotImplementedError

    async def find_by_name(self, query: str) -> dict[str, Any]:  # pragma: no cover - replaced per instance
        raise NotImplementedError


# ======================== parse_weather_query ========================


class TestParseWeatherQuery:
    """Raw query-string values → WeatherQuery."""

    def test_coordinates(self) -> None:
        query = parse_weather_query("10", "20", None)

        assert query == CoordinatesQuery(lat=10.0, lon=20.0)

    def test_negative_and_decimal_coordinates(self) -> None:
        query = parse_weather_query("-33.8688", "151.2093", None)

        assert isinstance(query, CoordinatesQuery)
        assert query.lat == pytest.approx(-33.8688)
        assert query.lon == pytest.approx(151.2093)

    def test_query_is_trimmed(self) -> None:
        assert parse_weather_query(None, None, "  Lon ") == CitySearchQuery(q="Lon")

    def test_any_non_empty_query_is_accepted(self) -> None:
        # The page only searches after 3 characters; the server accepts any
        assert parse_weather_query(None, None, "L") == CitySearchQuery(q="L")

    def test_coordinates_win_over_query(self) -> None:
        assert isinstance(parse_weather_query("1", "2", "Lon"), CoordinatesQuery)

    @pytest.mark.parametrize("lat,lon", [("inf", "2"), ("1", "-inf"), ("", "2"), ("1", "east")])
    def test_unusable_coordinates_fall_back_to_query(self, lat: str, lon: str) -> None:
        assert parse_weather_query(lat, lon, "Lon") == CitySearchQuery(q="Lon")

    @pytest.mark.parametrize(
        "lat,lon,q",
        [
            (None, None, None),
            ("10", None, None),
            (None, "20", ""),
            ("x", "y", "  "),
        ],
    )
    def test_missing_parameters(self, lat, lon, q) -> None:
        with pytest.raises(ValidationAppError) as exc:
            parse_weather_query(lat, lon, q)

        assert exc.value.code == "missing_parameters"
        assert exc.value.message == "Missing parameters"


# ======================== WeatherService ========================


class TestWeatherService:
    """Routing of validated queries to the provider client."""

    @pytest.mark.asyncio
    async def test_coordinates_call_current_weather(self) -> None:
        stub = StubWeatherClient(current={"name": "Paris", "main": {"temp": 12.0}})
        service = WeatherService(client=stub)

        result = await service.lookup(CoordinatesQuery(lat=48.85, lon=2.35))

        assert result == {"name": "Paris", "main": {"temp": 12.0}}
        stub.current_by_coordinates.assert_awaited_once_with(48.85, 2.35)
        stub.find_by_name.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_calls_find(self) -> None:
        stub = StubWeatherClient(found={"count": 1, "list": [{"name": "London"}]})
        service = WeatherService(client=stub)

        result = await service.lookup(CitySearchQuery(q="Lon"))

        assert result["list"] == [{"name": "London"}]
        stub.find_by_name.assert_awaited_once_with("Lon")
        stub.current_by_coordinates.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_payload_without_list_gets_empty_list(self) -> None:
        stub = StubWeatherClient(found={"message": "like", "count": 0})

        result = await WeatherService(client=stub).lookup(CitySearchQuery(q="Zz"))

        assert result == {"message": "like", "count": 0, "list": []}

    @pytest.mark.asyncio
    async def test_search_payload_with_null_list_gets_empty_list(self) -> None:
        stub = StubWeatherClient(found={"count": 0, "list": None})

        result = await WeatherService(client=stub).lookup(CitySearchQuery(q="Zz"))

        assert result["list"] == []

    @pytest.mark.asyncio
    async def test_upstream_errors_propagate(self) -> None:
        stub = StubWeatherClient()
        stub.current_by_coordinates = AsyncMock(
            side_effect=UpstreamAppError(code="weather_upstream_status", message="Failed to fetch weather data")
        )

        with pytest.raises(UpstreamAppError):
            await WeatherService(client=stub).lookup(CoordinatesQuery(lat=1, lon=2))
