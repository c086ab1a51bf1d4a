"""Read-only view model derived from a :class:`SearchState`.

Builds everything a client needs to draw the search screen: the map
centre and markers, the category buttons, the "Nearest ..." heading and
one "<name> - <distance> km away" line per result.  Never mutates state.
"""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, Field

from src.models.enums import PlaceCategory
from src.models.place import Coordinate, Marker, Suggestion
from src.models.state import SearchState
from src.services.ranking import sort_by_distance

INDIA_CENTER: Final[Coordinate] = Coordinate(lat=20.5937, lng=78.9629)
DEFAULT_ZOOM: Final[int] = 14
NO_LOCATION_MESSAGE: Final[str] = "No location selected or location details not available."


class MapView(BaseModel):
    center: Coordinate
    zoom: int


class CategoryButton(BaseModel):
    category: PlaceCategory
    label: str


class SearchView(BaseModel):
    search_text: str
    pincode_text: str
    suggestions: list[Suggestion] = Field(default_factory=list)
    initial_center: Coordinate
    map: MapView | None = None
    message: str | None = None
    reference_marker: Marker | None = None
    markers: list[Marker] = Field(default_factory=list)
    category_buttons: list[CategoryButton] = Field(default_factory=list)
    heading: str | None = None
    result_lines: list[str] = Field(default_factory=list)


def heading_for(category: PlaceCategory) -> str:
    value = category.value
    return f"Nearest {value[:1].upper()}{value[1:]}"


def build_view(
    state: SearchState,
    *,
    initial_center: Coordinate = INDIA_CENTER,
    zoom: int = DEFAULT_ZOOM,
    sort_results: bool = False,
) -> SearchView:
    """Project *state* into a :class:`SearchView`.

    ``sort_results`` orders the result lines nearest first; by default
    they keep the provider's order.
    """
    view = SearchView(
        search_text=state.search_text,
        pincode_text=state.pincode_text,
        suggestions=list(state.suggestions),
        initial_center=initial_center,
    )

    reference = state.reference
    if reference is None:
        view.message = NO_LOCATION_MESSAGE
        return view

    view.map = MapView(center=reference.coordinate, zoom=zoom)
    view.reference_marker = Marker(position=reference.coordinate, name=reference.name)
    view.markers = list(state.markers)
    view.category_buttons = [
        CategoryButton(category=category, label=category.label)
        for category in PlaceCategory
    ]

    if state.results is not None and state.active_category is not None:
        results = sort_by_distance(state.results) if sort_results else state.results
        view.heading = heading_for(state.active_category)
        view.result_lines = [
            f"{place.name} - {place.distance_km:.2f} km away" for place in results
        ]

    return view
