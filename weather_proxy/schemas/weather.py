"""Pydantic schemas for weather lookups."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field


class CoordinatesQuery(BaseModel):
    """Current-conditions lookup for a coordinate pair."""

    kind: Literal["coordinates"] = "coordinates"
    lat: float = Field(..., description="Latitude in decimal degrees.")
    lon: float = Field(..., description="Longitude in decimal degrees.")


class CitySearchQuery(BaseModel):
    """Free-text location search returning candidate locations."""

    kind: Literal["search"] = "search"
    q: str = Field(..., min_length=1, description="City name or prefix to search for.")


WeatherQuery = Union[CoordinatesQuery, CitySearchQuery]


class ErrorResponse(BaseModel):
    """Body returned for every handled error."""

    error: str = Field(..., description="Human-readable error message.")
