from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from weather_proxy.adapters.weather.factory import create_weather_client
from weather_proxy.core.rate_limit import enforce_rate_limit
from weather_proxy.schemas.weather import ErrorResponse, WeatherQuery
from weather_proxy.services.weather_service import WeatherService, parse_weather_query

router = APIRouter(tags=["Weather"])

_weather_service: WeatherService | None = None


def get_weather_service() -> WeatherService:
    """Return the process-wide weather service, building it on first use.

    Resolved before the rate limit so a misconfigured provider costs no quota.
    """
    global _weather_service
    if _weather_service is None:
        _weather_service = WeatherService(client=create_weather_client())
    return _weather_service


def get_weather_query(
    lat: Annotated[str | None, Query(description="Latitude (requires lon).")] = None,
    lon: Annotated[str | None, Query(description="Longitude (requires lat).")] = None,
    q: Annotated[str | None, Query(description="City name to search for.")] = None,
) -> WeatherQuery:
    """Validate the query string before any quota is consumed."""
    return parse_weather_query(lat, lon, q)


@router.get(
    "/weather",
    responses={
        400: {"model": ErrorResponse, "description": "Missing parameters"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
        500: {"model": ErrorResponse, "description": "Failed to fetch weather data"},
        503: {"model": ErrorResponse, "description": "Rate limiter unavailable"},
    },
)
async def get_weather(
    query: Annotated[WeatherQuery, Depends(get_weather_query)],
    service: Annotated[WeatherService, Depends(get_weather_service)],
    _rate_limit: Annotated[None, Depends(enforce_rate_limit)],
) -> JSONResponse:
    """Proxy a weather lookup to the upstream provider.

    Send ``lat`` and ``lon`` for current conditions at a location, or ``q``
    to search candidate locations by name (``{"list": [...]}``). The
    provider's JSON is relayed unchanged; the API key never leaves the server.

    Raises:
        ValidationAppError: 400 when neither coordinates nor a query is given.
        RateLimitAppError: 429 when the client exceeded its quota.
        UpstreamAppError: 500 when the provider call fails.
        ConfigurationAppError: 500 when the provider setting is unusable.
    """
    payload = await service.lookup(query)
    return JSONResponse(content=payload)
