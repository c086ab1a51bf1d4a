from src.models.enums import FlowStatus, PlaceCategory, SearchFlow
from src.models.place import (
    Coordinate,
    GeocodeResult,
    Marker,
    Place,
    RankedPlace,
    Suggestion,
)
from src.models.state import FlowOutcome, SearchState

__all__ = [
    "Coordinate",
    "FlowOutcome",
    "FlowStatus",
    "GeocodeResult",
    "Marker",
    "Place",
    "PlaceCategory",
    "RankedPlace",
    "SearchFlow",
    "SearchState",
    "Suggestion",
]
