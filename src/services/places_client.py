"""Async client for the Google Maps Platform web services used by NikatKhoj.

Wraps four endpoints behind the :class:`PlacesProvider` interface:

* Places Autocomplete  -- ``place/autocomplete/json``
* Place Details        -- ``place/details/json``
* Geocoding            -- ``geocode/json``
* Places Nearby Search -- ``place/nearbysearch/json``

Every response carries a ``status`` field; anything other than ``OK``
(``ZERO_RESULTS``, ``OVER_QUERY_LIMIT``, ``REQUEST_DENIED``, ...) is
raised as :class:`ProviderError`.  Transport failures are retried with
exponential backoff; provider status failures are not, since repeating
the same query returns the same status.
"""

from __future__ import annotations

from typing import Any, Final, Protocol, runtime_checkable

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.models.enums import PlaceCategory
from src.models.place import Coordinate, GeocodeResult, Place, Suggestion

logger = structlog.get_logger(__name__)

_DEFAULT_BASE_URL: Final[str] = "https://maps.googleapis.com/maps/api"
_DETAIL_FIELDS: Final[str] = "place_id,name,formatted_address,geometry,types"
# Places Nearby Search rejects radii above 50 km.
_MAX_NEARBY_RADIUS_M: Final[int] = 50_000


class ProviderError(Exception):
    """A provider call that did not produce a usable ``OK`` response."""

    def __init__(self, operation: str, status: str, message: str = "") -> None:
        self.operation = operation
        self.status = status
        self.message = message
        detail = f"{operation} failed with status {status}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Provider protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class PlacesProvider(Protocol):
    """The four lookups the search orchestrator needs."""

    async def autocomplete_predictions(self, text: str, country: str) -> list[Suggestion]: ...

    async def place_details(self, place_id: str) -> Place: ...

    async def geocode(self, address: str, country: str) -> list[GeocodeResult]: ...

    async def nearby_search(
        self, center: Coordinate, radius_meters: int, category: PlaceCategory
    ) -> list[Place]: ...


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def _parse_coordinate(entry: dict[str, Any]) -> Coordinate | None:
    location = (entry.get("geometry") or {}).get("location") or {}
    lat = location.get("lat")
    lng = location.get("lng")
    if lat is None or lng is None:
        return None
    try:
        return Coordinate(lat=lat, lng=lng)
    except ValidationError:
        return None


def _parse_place(entry: dict[str, Any]) -> Place | None:
    coordinate = _parse_coordinate(entry)
    if coordinate is None:
        return None
    return Place(
        place_id=entry.get("place_id"),
        name=entry.get("name") or "Unknown",
        formatted_address=entry.get("formatted_address") or entry.get("vicinity") or "",
        coordinate=coordinate,
        types=tuple(entry.get("types") or ()),
    )


# ---------------------------------------------------------------------------
# GooglePlacesClient
# ---------------------------------------------------------------------------


class GooglePlacesClient:
    """Google Maps Platform client implementing :class:`PlacesProvider`.

    Parameters
    ----------
    api_key:
        Google Maps Platform API key with Places and Geocoding enabled.
    base_url:
        Root of the Maps web service API.
    timeout_seconds:
        Per-request timeout.
    max_attempts:
        Total attempts for a request that fails at the transport level.
    transport:
        Optional httpx transport, used by tests to stub the network.
    """

    __slots__ = ("_api_key", "_client", "_max_attempts")

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = _DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        max_attempts: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._max_attempts = max_attempts
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _send(self, path: str, params: dict[str, str]) -> httpx.Response:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            reraise=True,
        )
        return await retrying(self._client.get, path, params={**params, "key": self._api_key})

    async def _get(self, operation: str, path: str, params: dict[str, str]) -> dict[str, Any]:
        """Issue a GET and return the decoded body of an ``OK`` response."""
        try:
            response = await self._send(path, params)
        except httpx.TransportError as exc:
            raise ProviderError(operation, "TRANSPORT_ERROR", str(exc)) from exc

        if response.status_code >= 400:
            raise ProviderError(operation, f"HTTP_{response.status_code}")

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(operation, "INVALID_RESPONSE", "body is not JSON") from exc

        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            raise ProviderError(
                operation,
                status or "INVALID_RESPONSE",
                data.get("error_message", "") if isinstance(data, dict) else "",
            )

        logger.debug("places_client.response_ok", operation=operation)
        return data

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def autocomplete_predictions(self, text: str, country: str) -> list[Suggestion]:
        """Return location suggestions for *text* within *country*."""
        data = await self._get(
            "autocomplete",
            "/place/autocomplete/json",
            {"input": text, "components": f"country:{country.lower()}"},
        )
        suggestions: list[Suggestion] = []
        for prediction in data.get("predictions", []):
            place_id = prediction.get("place_id")
            description = prediction.get("description")
            if not place_id or not description:
                continue
            suggestions.append(Suggestion(place_id=place_id, description=description))
        return suggestions

    async def place_details(self, place_id: str) -> Place:
        """Fetch the full place record for *place_id*."""
        data = await self._get(
            "place_details",
            "/place/details/json",
            {"place_id": place_id, "fields": _DETAIL_FIELDS},
        )
        place = _parse_place(data.get("result") or {})
        if place is None:
            raise ProviderError("place_details", "INVALID_RESPONSE", "place has no geometry")
        return place

    async def geocode(self, address: str, country: str) -> list[GeocodeResult]:
        """Geocode *address* (e.g. a pincode) within *country*."""
        data = await self._get(
            "geocode",
            "/geocode/json",
            {"address": address, "components": f"country:{country.upper()}"},
        )
        results: list[GeocodeResult] = []
        for entry in data.get("results", []):
            coordinate = _parse_coordinate(entry)
            if coordinate is None:
                logger.warning("places_client.geocode_result_without_geometry")
                continue
            results.append(
                GeocodeResult(
                    formatted_address=entry.get("formatted_address", ""),
                    coordinate=coordinate,
                    place_id=entry.get("place_id"),
                )
            )
        return results

    async def nearby_search(
        self, center: Coordinate, radius_meters: int, category: PlaceCategory
    ) -> list[Place]:
        """Places of *category* within *radius_meters* of *center*."""
        data = await self._get(
            "nearby_search",
            "/place/nearbysearch/json",
            {
                "location": f"{center.lat},{center.lng}",
                "radius": str(min(radius_meters, _MAX_NEARBY_RADIUS_M)),
                "type": category.value,
            },
        )
        places: list[Place] = []
        for entry in data.get("results", []):
            place = _parse_place(entry)
            if place is None:
                logger.warning(
                    "places_client.nearby_result_without_geometry",
                    place_id=entry.get("place_id"),
                )
                continue
            places.append(place)
        return places
