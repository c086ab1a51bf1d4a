"""Stateless place helpers: categories, point-to-point distance, ranking.

These endpoints never call the places provider.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from src.models.enums import PlaceCategory
from src.models.place import Coordinate, Place, RankedPlace
from src.services.distance import distance_km
from src.services.ranking import rank, sort_by_distance

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/places", tags=["places"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CategoryInfo(BaseModel):
    category: PlaceCategory
    label: str


class DistanceResponse(BaseModel):
    origin: Coordinate
    destination: Coordinate
    distance_km: float
    distance_km_rounded: float


class RankRequest(BaseModel):
    reference: Coordinate
    candidates: list[Place] = Field(default_factory=list, max_length=500)
    sort: bool = Field(default=False, description="Order results nearest first")


class RankResponse(BaseModel):
    reference: Coordinate
    results: list[RankedPlace]
    count: int


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=list[CategoryInfo])
async def list_categories() -> list[CategoryInfo]:
    """Nearby-search categories with their button labels."""
    return [CategoryInfo(category=c, label=c.label) for c in PlaceCategory]


@router.get("/distance", response_model=DistanceResponse)
async def get_distance(
    from_lat: float = Query(..., ge=-90, le=90),
    from_lng: float = Query(..., ge=-180, le=180),
    to_lat: float = Query(..., ge=-90, le=90),
    to_lng: float = Query(..., ge=-180, le=180),
) -> DistanceResponse:
    """Great-circle distance between two points, in kilometres."""
    origin = Coordinate(lat=from_lat, lng=from_lng)
    destination = Coordinate(lat=to_lat, lng=to_lng)
    distance = distance_km(origin, destination)
    return DistanceResponse(
        origin=origin,
        destination=destination,
        distance_km=distance,
        distance_km_rounded=round(distance, 2),
    )


@router.post("/rank", response_model=RankResponse)
async def rank_places(body: RankRequest) -> RankResponse:
    """Annotate candidate places with their distance from ``reference``.

    Input order is kept unless ``sort`` is set.
    """
    ranked = rank(body.reference, body.candidates)
    if body.sort:
        ranked = sort_by_distance(ranked)
    logger.debug("places.ranked", count=len(ranked), sorted=body.sort)
    return RankResponse(reference=body.reference, results=ranked, count=len(ranked))
