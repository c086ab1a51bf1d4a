"""NikatKhoj service layer -- distance, ranking, places provider, search flows."""

from __future__ import annotations

from src.services.distance import EARTH_RADIUS_KM, distance_km, haversine_km
from src.services.orchestrator import InputValidationError, SearchOrchestrator
from src.services.places_client import GooglePlacesClient, PlacesProvider, ProviderError
from src.services.presentation import SearchView, build_view
from src.services.ranking import rank, sort_by_distance
from src.services.sessions import SearchSession, SessionRegistry

__all__ = [
    "EARTH_RADIUS_KM",
    "GooglePlacesClient",
    "InputValidationError",
    "PlacesProvider",
    "ProviderError",
    "SearchOrchestrator",
    "SearchSession",
    "SearchView",
    "SessionRegistry",
    "build_view",
    "distance_km",
    "haversine_km",
    "rank",
    "sort_by_distance",
]
