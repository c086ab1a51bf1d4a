"""Annotate nearby-search candidates with their distance from a reference.

:func:`rank` keeps the provider's order.  Sorting by distance is a
separate, opt-in step (:func:`sort_by_distance`).
"""

from __future__ import annotations

from collections.abc import Sequence

from src.models.place import Coordinate, Place, RankedPlace
from src.services.distance import distance_km


def rank(reference: Coordinate, candidates: Sequence[Place]) -> list[RankedPlace]:
    """Attach ``distance_km`` (rounded to 2 decimals) to every candidate.

    The output has the same length and order as *candidates*.
    """
    return [
        RankedPlace(
            **place.model_dump(exclude={"distance_km"}),
            distance_km=round(distance_km(reference, place.coordinate), 2),
        )
        for place in candidates
    ]


def sort_by_distance(ranked: Sequence[RankedPlace]) -> list[RankedPlace]:
    """Return *ranked* ordered nearest first; ties keep their input order."""
    return sorted(ranked, key=lambda place: place.distance_km)
