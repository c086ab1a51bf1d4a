"""Search orchestrator: runs the lookup flows for one search session.

Four flows, each triggered by a user action and each owning one slice
of :class:`~src.models.state.SearchState`:

    * Autocomplete   -- search text      -> suggestions
    * Place details  -- chosen suggestion -> reference location
    * Pincode geocode -- postal code      -> reference location
    * Nearby search  -- category button  -> ranked results + markers

Flows are never chained: choosing a new reference location does not
start a nearby search on its own.

Provider failures are caught here, logged, and turned into a cleared or
absent slice plus a ``failed`` :class:`FlowOutcome`.  Nothing raised by
the provider escapes to the caller.

Stale responses
---------------
Requests for a slice are tagged with a per-slice sequence number.  When
a response arrives after a newer request for the same slice was issued
(or after the slice was reset), it is dropped with a ``stale`` outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

import structlog

from src.models.enums import FlowStatus, PlaceCategory, SearchFlow
from src.models.place import Place
from src.models.state import (
    FlowOutcome,
    SearchState,
    clear_results,
    clear_suggestions,
    select_suggestion,
    with_active_category,
    with_pincode_text,
    with_reference,
    with_results,
    with_search_text,
    with_suggestions,
)
from src.services.places_client import ProviderError
from src.services.ranking import rank

if TYPE_CHECKING:
    from src.services.places_client import PlacesProvider

logger = structlog.get_logger(__name__)

DEFAULT_COUNTRY: Final[str] = "in"
DEFAULT_NEARBY_RADIUS_M: Final[int] = 20_000

# State slices guarded by sequence numbers.
_SUGGESTIONS: Final[str] = "suggestions"
_REFERENCE: Final[str] = "reference"
_RESULTS: Final[str] = "results"


class InputValidationError(ValueError):
    """Blank user input; never sent to the provider."""


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InputValidationError(f"{field} is empty")
    return value


class _FlowSequencer:
    """Monotonic request counters, one per state slice."""

    __slots__ = ("_latest",)

    def __init__(self) -> None:
        self._latest: dict[str, int] = {}

    def issue(self, slot: str) -> int:
        token = self._latest.get(slot, 0) + 1
        self._latest[slot] = token
        return token

    def is_current(self, slot: str, token: int) -> bool:
        return self._latest.get(slot) == token


class SearchOrchestrator:
    """Owns one :class:`SearchState` and the flows that update it.

    Parameters
    ----------
    provider:
        Places provider (see :class:`~src.services.places_client.PlacesProvider`).
    country:
        Country every autocomplete and geocode request is restricted to.
    radius_meters:
        Nearby-search radius around the reference location.
    """

    __slots__ = ("_country", "_provider", "_radius_meters", "_seq", "_state")

    def __init__(
        self,
        provider: PlacesProvider,
        *,
        country: str = DEFAULT_COUNTRY,
        radius_meters: int = DEFAULT_NEARBY_RADIUS_M,
        state: SearchState | None = None,
    ) -> None:
        self._provider = provider
        self._country = country
        self._radius_meters = radius_meters
        self._state = state or SearchState()
        self._seq = _FlowSequencer()

    @property
    def state(self) -> SearchState:
        return self._state

    # ------------------------------------------------------------------
    # Autocomplete
    # ------------------------------------------------------------------

    async def update_search_text(self, text: str) -> FlowOutcome:
        """Store *text* and refresh the suggestion list for it."""
        flow = SearchFlow.AUTOCOMPLETE
        self._state = with_search_text(self._state, text)
        # Issued before validation so clearing the input also invalidates
        # any suggestions request still in flight.
        token = self._seq.issue(_SUGGESTIONS)

        try:
            _require_text(text, "search text")
        except InputValidationError as exc:
            self._state = clear_suggestions(self._state)
            return FlowOutcome(flow=flow, status=FlowStatus.SKIPPED, reason=str(exc))

        try:
            suggestions = await self._provider.autocomplete_predictions(text, self._country)
        except ProviderError as exc:
            if not self._seq.is_current(_SUGGESTIONS, token):
                return self._stale(flow)
            logger.info("orchestrator.autocomplete_failed", status=exc.status)
            self._state = clear_suggestions(self._state)
            return FlowOutcome(flow=flow, status=FlowStatus.FAILED, reason=str(exc))

        if not self._seq.is_current(_SUGGESTIONS, token):
            return self._stale(flow)

        self._state = with_suggestions(self._state, suggestions)
        return FlowOutcome(flow=flow, status=FlowStatus.OK)

    # ------------------------------------------------------------------
    # Place details
    # ------------------------------------------------------------------

    async def select_suggestion(self, place_id: str, description: str = "") -> FlowOutcome:
        """Make the suggested place the reference location."""
        flow = SearchFlow.PLACE_DETAILS
        try:
            _require_text(place_id, "place id")
        except InputValidationError as exc:
            return FlowOutcome(flow=flow, status=FlowStatus.SKIPPED, reason=str(exc))

        self._state = select_suggestion(self._state, description)
        self._seq.issue(_SUGGESTIONS)
        token = self._seq.issue(_REFERENCE)

        try:
            place = await self._provider.place_details(place_id)
        except ProviderError as exc:
            if not self._seq.is_current(_REFERENCE, token):
                return self._stale(flow)
            logger.warning(
                "orchestrator.place_details_failed",
                place_id=place_id,
                status=exc.status,
                error=exc.message,
            )
            self._set_reference(None)
            return FlowOutcome(flow=flow, status=FlowStatus.FAILED, reason=str(exc))

        if not self._seq.is_current(_REFERENCE, token):
            return self._stale(flow)

        self._set_reference(place)
        self._state = clear_suggestions(self._state)
        logger.info("orchestrator.reference_selected", place_id=place.place_id)
        return FlowOutcome(flow=flow, status=FlowStatus.OK)

    # ------------------------------------------------------------------
    # Pincode geocode
    # ------------------------------------------------------------------

    def update_pincode_text(self, text: str) -> SearchState:
        self._state = with_pincode_text(self._state, text)
        return self._state

    async def search_pincode(self, pincode: str | None = None) -> FlowOutcome:
        """Geocode a postal code and make it the reference location.

        Uses the stored pincode input when *pincode* is not given.  A blank
        code issues no request and leaves the reference location as is.
        """
        flow = SearchFlow.PINCODE_GEOCODE
        if pincode is not None:
            self._state = with_pincode_text(self._state, pincode)

        try:
            code = _require_text(self._state.pincode_text, "pincode").strip()
        except InputValidationError as exc:
            return FlowOutcome(flow=flow, status=FlowStatus.SKIPPED, reason=str(exc))

        token = self._seq.issue(_REFERENCE)
        try:
            results = await self._provider.geocode(code, self._country.upper())
            if not results:
                raise ProviderError("geocode", "ZERO_RESULTS")
        except ProviderError as exc:
            if not self._seq.is_current(_REFERENCE, token):
                return self._stale(flow)
            logger.warning(
                "orchestrator.pincode_geocode_failed",
                pincode=code,
                status=exc.status,
            )
            self._set_reference(None)
            return FlowOutcome(flow=flow, status=FlowStatus.FAILED, reason=str(exc))

        if not self._seq.is_current(_REFERENCE, token):
            return self._stale(flow)

        first = results[0]
        self._set_reference(
            Place(
                name=f"Location with Pincode {code}",
                formatted_address=first.formatted_address,
                coordinate=first.coordinate,
            )
        )
        self._state = with_pincode_text(self._state, "")
        logger.info("orchestrator.pincode_resolved", pincode=code)
        return FlowOutcome(flow=flow, status=FlowStatus.OK)

    # ------------------------------------------------------------------
    # Nearby search
    # ------------------------------------------------------------------

    async def find_nearby(self, category: PlaceCategory) -> FlowOutcome:
        """Search *category* around the reference location and rank the hits."""
        flow = SearchFlow.NEARBY_SEARCH
        reference = self._state.reference
        if reference is None:
            return FlowOutcome(
                flow=flow,
                status=FlowStatus.SKIPPED,
                reason="no reference location selected",
            )

        category = PlaceCategory(category)
        self._state = with_active_category(self._state, category)
        token = self._seq.issue(_RESULTS)

        try:
            places = await self._provider.nearby_search(
                reference.coordinate, self._radius_meters, category
            )
        except ProviderError as exc:
            if not self._seq.is_current(_RESULTS, token):
                return self._stale(flow)
            logger.warning(
                "orchestrator.nearby_search_failed",
                category=category.value,
                status=exc.status,
                error=exc.message,
            )
            self._state = clear_results(self._state)
            return FlowOutcome(flow=flow, status=FlowStatus.FAILED, reason=str(exc))

        if not self._seq.is_current(_RESULTS, token):
            return self._stale(flow)

        ranked = rank(reference.coordinate, places)
        self._state = with_results(self._state, ranked)
        logger.info(
            "orchestrator.nearby_search_done",
            category=category.value,
            results_count=len(ranked),
        )
        return FlowOutcome(flow=flow, status=FlowStatus.OK)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _set_reference(self, place: Place | None) -> None:
        # Results computed for the previous reference must not land.
        self._seq.issue(_RESULTS)
        self._state = with_reference(self._state, place)

    @staticmethod
    def _stale(flow: SearchFlow) -> FlowOutcome:
        logger.debug("orchestrator.stale_response_dropped", flow=flow.value)
        return FlowOutcome(flow=flow, status=FlowStatus.STALE)
