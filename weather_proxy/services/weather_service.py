"""Weather lookup service: query validation and upstream routing.

This is the proxy's business logic. It handles:
- Turning raw ``lat``/``lon``/``q`` query values into a WeatherQuery
- Routing coordinate lookups and location searches to the provider client
- Normalizing search payloads so ``list`` is always present
"""

import logging
import math
from typing import Any

from weather_proxy.adapters.weather.base import AbstractWeatherClient
from weather_proxy.core.errors import MISSING_PARAMETERS_MESSAGE, ValidationAppError
from weather_proxy.schemas.weather import CitySearchQuery, CoordinatesQuery, WeatherQuery

logger = logging.getLogger(__name__)


def _parse_coordinate(raw: str | None) -> float | None:
    """Parse a coordinate query value, returning None when unusable.

    Examples:
        >>> _parse_coordinate(" 51.5 ")
        51.5
        >>> _parse_coordinate("nan") is None
        True
        >>> _parse_coordinate("abc") is None
        True
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def parse_weather_query(
    lat: str | None,
    lon: str | None,
    q: str | None,
) -> WeatherQuery:
    """Build a WeatherQuery from raw query-string values.

    Coordinates win when both parse; otherwise a non-blank ``q`` selects a
    location search.

    Args:
        lat: Raw ``lat`` value, if sent.
        lon: Raw ``lon`` value, if sent.
        q: Raw ``q`` value, if sent.

    Returns:
        CoordinatesQuery or CitySearchQuery.

    Raises:
        ValidationAppError: If neither form can be built.
    """
    latitude = _parse_coordinate(lat)
    longitude = _parse_coordinate(lon)
    if latitude is not None and longitude is not None:
        return CoordinatesQuery(lat=latitude, lon=longitude)

    search = q.strip() if q else ""
    if search:
        return CitySearchQuery(q=search)

    raise ValidationAppError(
        code="missing_parameters",
        message=MISSING_PARAMETERS_MESSAGE,
        details={
            "context": {
                "lat_present": lat is not None,
                "lon_present": lon is not None,
                "q_present": q is not None,
            }
        },
    )


class WeatherService:
    """Service relaying weather lookups to the upstream provider.

    Attributes:
        client: Provider client adapter.
    """

    def __init__(self, client: AbstractWeatherClient) -> None:
        self.client = client

    async def lookup(self, query: WeatherQuery) -> dict[str, Any]:
        """Run a lookup and return the provider payload.

        Args:
            query: Validated coordinate or search query.

        Returns:
            The provider JSON body. Search payloads always include ``list``.

        Raises:
            UpstreamAppError: If the provider call fails.
        """
        if isinstance(query, CoordinatesQuery):
            logger.info("weather.lookup", extra={"query_kind": query.kind})
            return await self.client.current_by_coordinates(query.lat, query.lon)

        logger.info(
            "weather.lookup",
            extra={"query_kind": query.kind, "query_length": len(query.q)},
        )
        payload = await self.client.find_by_name(query.q)
        if not isinstance(payload.get("list"), list):
            payload["list"] = []
        return payload
