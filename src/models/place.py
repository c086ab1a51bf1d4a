"""Geographic value types shared by the provider client, ranker and state."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A WGS84 point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class Suggestion(BaseModel):
    """One autocomplete prediction."""

    model_config = ConfigDict(frozen=True)

    place_id: str
    description: str


class GeocodeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    formatted_address: str
    coordinate: Coordinate
    place_id: str | None = None


class Place(BaseModel):
    """A place as returned by the provider.

    ``place_id`` is ``None`` for places synthesized locally, e.g. from a
    pincode geocode.
    """

    model_config = ConfigDict(frozen=True)

    place_id: str | None = None
    name: str
    formatted_address: str = ""
    coordinate: Coordinate
    types: tuple[str, ...] = ()


class RankedPlace(Place):
    """A :class:`Place` annotated with its distance from a reference point."""

    distance_km: float = Field(ge=0)


class Marker(BaseModel):
    model_config = ConfigDict(frozen=True)

    position: Coordinate
    name: str
