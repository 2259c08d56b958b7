"""OpenWeatherMap client adapter."""

import logging
from typing import Any

import httpx

from weather_proxy.adapters.weather.base import AbstractWeatherClient
from weather_proxy.core.errors import UPSTREAM_FAILURE_MESSAGE, UpstreamAppError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
CURRENT_WEATHER_PATH = "/weather"
FIND_PATH = "/find"


class OpenWeatherMapClient(AbstractWeatherClient):
    """Client for the OpenWeatherMap 2.5 REST API.

    Opens a short-lived ``httpx.AsyncClient`` per call, with the API key
    injected as the ``appid`` query parameter.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        units: str = "metric",
        search_type: str = "like",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Provider API key; calls fail with UpstreamAppError when missing.
            base_url: API base URL.
            units: Unit system (``metric``, ``imperial`` or ``standard``).
            search_type: Location search match mode (``like`` or ``accurate``).
            timeout_seconds: Timeout for each upstream request.
            transport: Optional httpx transport (used to stub the provider in tests).
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.search_type = search_type
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def current_by_coordinates(self, lat: float, lon: float) -> dict[str, Any]:
        return await self._get(CURRENT_WEATHER_PATH, {"lat": lat, "lon": lon})

    async def find_by_name(self, query: str) -> dict[str, Any]:
        return await self._get(FIND_PATH, {"q": query, "type": self.search_type})

    def _fail(self, code: str, endpoint: str, **details: Any) -> UpstreamAppError:
        logger.warning(
            "weather.upstream_error",
            extra={"error_code": code, "endpoint": endpoint, **details},
        )
        return UpstreamAppError(
            code=code,
            message=UPSTREAM_FAILURE_MESSAGE,
            details={"endpoint": endpoint, **details},
        )

    async def _get(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """Issue a GET against the provider and return its JSON object.

        Raises:
            UpstreamAppError: On missing credentials, transport errors,
                non-2xx statuses, or a body that is not a JSON object.
        """
        if not self._api_key:
            raise self._fail("weather_api_key_missing", endpoint)

        request_params = {**params, "units": self.units, "appid": self._api_key}

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(endpoint, params=request_params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise self._fail("weather_upstream_timeout", endpoint, error_type=type(exc).__name__) from exc
        except httpx.HTTPStatusError as exc:
            raise self._fail(
                "weather_upstream_status",
                endpoint,
                http_status=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise self._fail("weather_upstream_unreachable", endpoint, error_type=type(exc).__name__) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise self._fail("weather_upstream_invalid_json", endpoint) from exc

        if not isinstance(payload, dict):
            raise self._fail(
                "weather_upstream_unexpected_body",
                endpoint,
                error_type=type(payload).__name__,
            )

        logger.debug(
            "weather.upstream_ok",
            extra={"endpoint": endpoint, "http_status": response.status_code},
        )
        return payload
