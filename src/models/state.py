"""Search state and the pure transitions applied to it.

Each flow outcome maps to exactly one function here that takes the
current :class:`SearchState` and returns a new one.  Nothing mutates a
state in place, so the view layer can hold on to any snapshot it reads.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from src.models.enums import FlowStatus, PlaceCategory, SearchFlow
from src.models.place import Marker, Place, RankedPlace, Suggestion


class SearchState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    pincode_text: str = ""
    suggestions: tuple[Suggestion, ...] = ()
    reference: Place | None = None
    active_category: PlaceCategory | None = None
    # ``None`` means no nearby search has completed for the current
    # reference; an empty tuple is a successful search with no places.
    results: tuple[RankedPlace, ...] | None = None
    markers: tuple[Marker, ...] = ()


class FlowOutcome(BaseModel):
    """What happened to one flow invocation."""

    model_config = ConfigDict(frozen=True)

    flow: SearchFlow
    status: FlowStatus
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == FlowStatus.OK


# ---------------------------------------------------------------------------
# Autocomplete
# ---------------------------------------------------------------------------


def with_search_text(state: SearchState, text: str) -> SearchState:
    return state.model_copy(update={"search_text": text})


def with_suggestions(state: SearchState, suggestions: list[Suggestion]) -> SearchState:
    return state.model_copy(update={"suggestions": tuple(suggestions)})


def clear_suggestions(state: SearchState) -> SearchState:
    if not state.suggestions:
        return state
    return state.model_copy(update={"suggestions": ()})


# ---------------------------------------------------------------------------
# Reference location (place details / pincode geocode)
# ---------------------------------------------------------------------------


def select_suggestion(state: SearchState, description: str) -> SearchState:
    """Close the suggestion list; a blank description keeps the typed text."""
    search_text = description if description.strip() else state.search_text
    return state.model_copy(update={"search_text": search_text, "suggestions": ()})


def with_reference(state: SearchState, place: Place | None) -> SearchState:
    """Replace the reference location and reset everything derived from it."""
    return state.model_copy(
        update={
            "reference": place,
            "active_category": None,
            "results": None,
            "markers": (),
        }
    )


def with_pincode_text(state: SearchState, text: str) -> SearchState:
    return state.model_copy(update={"pincode_text": text})


# ---------------------------------------------------------------------------
# Nearby search
# ---------------------------------------------------------------------------


def with_active_category(state: SearchState, category: PlaceCategory) -> SearchState:
    return state.model_copy(update={"active_category": category})


def with_results(state: SearchState, results: list[RankedPlace]) -> SearchState:
    markers = tuple(Marker(position=r.coordinate, name=r.name) for r in results)
    return state.model_copy(update={"results": tuple(results), "markers": markers})


def clear_results(state: SearchState) -> SearchState:
    return state.model_copy(update={"results": None, "markers": ()})
