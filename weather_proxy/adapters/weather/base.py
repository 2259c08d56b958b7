from abc import ABC, abstractmethod
from typing import Any


class AbstractWeatherClient(ABC):
	"""Interface for upstream weather providers returning raw JSON payloads."""

	@property
	@abstractmethod
	def is_configured(self) -> bool:
		"""Whether the client has the credentials it needs to call upstream."""
		...

	@abstractmethod
	async def current_by_coordinates(self, lat: float, lon: float) -> dict[str, Any]:
		"""Fetch current conditions for a coordinate pair.

		Args:
			lat: Latitude in decimal degrees.
			lon: Longitude in decimal degrees.

		Returns:
			dict[str, Any]: Provider payload, unmodified.

		Raises:
			UpstreamAppError: If the provider call fails or returns a malformed body.
		"""
		...

	@abstractmethod
	async def find_by_name(self, query: str) -> dict[str, Any]:
		"""Search candidate locations by free-text name.

		Args:
			query: City name (or prefix) typed by the user.

		Returns:
			dict[str, Any]: Provider payload, typically ``{"list": [...]}``.

		Raises:
			UpstreamAppError: If the provider call fails or returns a malformed body.
		"""
		...
