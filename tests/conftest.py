from __future__ import annotations

import pytest

from src.models.place import GeocodeResult, Place, Suggestion
from tests.fakes import GURUGRAM, NEW_DELHI, NORTH_DELHI, FakePlacesProvider


@pytest.fixture
def provider() -> FakePlacesProvider:
    fake = FakePlacesProvider()
    fake.suggestions["Connaught"] = [
        Suggestion(place_id="cp-1", description="Connaught Place, New Delhi, Delhi, India"),
        Suggestion(place_id="cp-2", description="Connaught Circus, New Delhi, Delhi, India"),
    ]
    fake.places["cp-1"] = Place(
        place_id="cp-1",
        name="Connaught Place",
        formatted_address="Connaught Place, New Delhi, Delhi 110001, India",
        coordinate=NEW_DELHI,
        types=("sublocality", "political"),
    )
    fake.geocode_results = [
        GeocodeResult(
            formatted_address="New Delhi, Delhi 110001, India",
            coordinate=NEW_DELHI,
            place_id="pin-110001",
        )
    ]
    fake.nearby = [
        Place(place_id="h-1", name="North Delhi Hospital", coordinate=NORTH_DELHI),
        Place(place_id="h-2", name="Gurugram Hospital", coordinate=GURUGRAM),
    ]
    return fake
