"""Main API router combining all v1 route modules.

Aggregates all routers under the ``/api/v1`` prefix so the
FastAPI application only needs to include a single router.

Includes:
    * Health: liveness and readiness probes
    * Places: categories, distance and ranking helpers
    * Search sessions: autocomplete, place details, pincode, nearby search
"""

from __future__ import annotations

from fastapi import APIRouter

from src.api.v1 import health, places, search

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health.router)
api_router.include_router(places.router)
api_router.include_router(search.router)
