from __future__ import annotations

from enum import StrEnum


class PlaceCategory(StrEnum):
    """Nearby-search categories, valued as Google Places ``type`` strings."""

    __slots__ = ()

    SCHOOL = "school"
    HOSPITAL = "hospital"
    PARK = "park"
    SHOPPING_MALL = "shopping_mall"
    SUBWAY_STATION = "subway_station"  # Metro
    TRAIN_STATION = "train_station"    # Railway

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS: dict[PlaceCategory, str] = {
    PlaceCategory.SCHOOL: "Find Nearest School",
    PlaceCategory.HOSPITAL: "Find Nearest Hospital",
    PlaceCategory.PARK: "Find Nearest Park",
    PlaceCategory.SHOPPING_MALL: "Find Nearest Shopping Mall",
    PlaceCategory.SUBWAY_STATION: "Find Nearest Metro Station",
    PlaceCategory.TRAIN_STATION: "Find Nearest Railway Station",
}


class SearchFlow(StrEnum):
    __slots__ = ()

    AUTOCOMPLETE = "autocomplete"
    PLACE_DETAILS = "place_details"
    PINCODE_GEOCODE = "pincode_geocode"
    NEARBY_SEARCH = "nearby_search"


class FlowStatus(StrEnum):
    __slots__ = ()

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"
    STALE = "stale"
