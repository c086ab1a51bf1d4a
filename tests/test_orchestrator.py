"""Tests for the search orchestrator flows and the stale-response guard."""

from __future__ import annotations

import asyncio

import pytest

from src.models.enums import FlowStatus, PlaceCategory, SearchFlow
from src.models.place import Place
from src.models.state import SearchState
from src.services.orchestrator import SearchOrchestrator
from src.services.places_client import ProviderError
from tests.fakes import GURUGRAM, NEW_DELHI, FakePlacesProvider


@pytest.fixture
def orchestrator(provider: FakePlacesProvider) -> SearchOrchestrator:
    return SearchOrchestrator(provider)


async def _with_reference(orchestrator: SearchOrchestrator) -> None:
    outcome = await orchestrator.select_suggestion("cp-1", "Connaught Place, New Delhi, Delhi, India")
    assert outcome.ok


# ---------------------------------------------------------------------------
# Autocomplete
# ---------------------------------------------------------------------------


class TestAutocomplete:
    async def test_stores_suggestions(self, orchestrator, provider) -> None:
        outcome = await orchestrator.update_search_text("Connaught")
        assert outcome.flow == SearchFlow.AUTOCOMPLETE
        assert outcome.status == FlowStatus.OK
        assert orchestrator.state.search_text == "Connaught"
        assert [s.place_id for s in orchestrator.state.suggestions] == ["cp-1", "cp-2"]

    async def test_restricted_to_india(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        assert provider.calls_for("autocomplete") == [("autocomplete", "Connaught", "in")]

    async def test_blank_input_clears_without_request(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        outcome = await orchestrator.update_search_text("   ")
        assert outcome.status == FlowStatus.SKIPPED
        assert orchestrator.state.suggestions == ()
        assert len(provider.calls_for("autocomplete")) == 1

    async def test_provider_failure_clears_suggestions(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        provider.errors["autocomplete"] = ProviderError("autocomplete", "ZERO_RESULTS")
        outcome = await orchestrator.update_search_text("Connaughtx")
        assert outcome.status == FlowStatus.FAILED
        assert "ZERO_RESULTS" in outcome.reason
        assert orchestrator.state.suggestions == ()

    async def test_stale_response_after_clear_is_dropped(self, orchestrator, provider) -> None:
        gate = asyncio.Event()
        provider.gates["autocomplete"] = gate

        pending = asyncio.create_task(orchestrator.update_search_text("Connaught"))
        await asyncio.sleep(0)
        cleared = await orchestrator.update_search_text("")
        gate.set()
        late = await pending

        assert cleared.status == FlowStatus.SKIPPED
        assert late.status == FlowStatus.STALE
        assert orchestrator.state.suggestions == ()
        assert orchestrator.state.search_text == ""

    async def test_out_of_order_responses_keep_latest(self, orchestrator, provider) -> None:
        provider.suggestions["Conn"] = []
        gate = asyncio.Event()
        provider.gates["autocomplete"] = gate

        older = asyncio.create_task(orchestrator.update_search_text("Conn"))
        newer = asyncio.create_task(orchestrator.update_search_text("Connaught"))
        await asyncio.sleep(0)
        gate.set()

        assert (await older).status == FlowStatus.STALE
        assert (await newer).status == FlowStatus.OK
        assert len(orchestrator.state.suggestions) == 2

    async def test_stale_failure_does_not_clear(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        gate = asyncio.Event()
        provider.gates["autocomplete"] = gate
        provider.errors["autocomplete"] = ProviderError("autocomplete", "UNKNOWN_ERROR")

        pending = asyncio.create_task(orchestrator.update_search_text("Connaughtx"))
        await asyncio.sleep(0)
        # A newer keystroke supersedes the failing request.
        provider.gates.pop("autocomplete")
        provider.errors.pop("autocomplete")
        assert (await orchestrator.update_search_text("Connaught")).ok
        gate.set()

        assert (await pending).status == FlowStatus.STALE
        assert len(orchestrator.state.suggestions) == 2


# ---------------------------------------------------------------------------
# Place details
# ---------------------------------------------------------------------------


class TestPlaceDetails:
    async def test_selection_sets_reference(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        outcome = await orchestrator.select_suggestion("cp-1", "Connaught Place, New Delhi, Delhi, India")

        state = orchestrator.state
        assert outcome.status == FlowStatus.OK
        assert state.reference is not None
        assert state.reference.place_id == "cp-1"
        assert state.reference.coordinate == NEW_DELHI
        assert state.suggestions == ()
        assert state.search_text == "Connaught Place, New Delhi, Delhi, India"

    async def test_blank_description_keeps_search_text(self, orchestrator, provider) -> None:
        await orchestrator.update_search_text("Connaught")
        outcome = await orchestrator.select_suggestion("cp-1")

        assert outcome.status == FlowStatus.OK
        assert orchestrator.state.search_text == "Connaught"
        assert orchestrator.state.suggestions == ()

    async def test_failure_sets_reference_absent(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        outcome = await orchestrator.select_suggestion("missing", "Nowhere")
        assert outcome.status == FlowStatus.FAILED
        assert orchestrator.state.reference is None

    async def test_blank_place_id_skipped(self, orchestrator, provider) -> None:
        outcome = await orchestrator.select_suggestion("  ")
        assert outcome.status == FlowStatus.SKIPPED
        assert provider.calls_for("place_details") == []

    async def test_selection_drops_inflight_suggestions(self, orchestrator, provider) -> None:
        gate = asyncio.Event()
        provider.gates["autocomplete"] = gate
        pending = asyncio.create_task(orchestrator.update_search_text("Connaught"))
        await asyncio.sleep(0)

        await orchestrator.select_suggestion("cp-1", "Connaught Place")
        gate.set()

        assert (await pending).status == FlowStatus.STALE
        assert orchestrator.state.suggestions == ()

    async def test_does_not_trigger_nearby_search(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        assert provider.calls_for("nearby_search") == []


# ---------------------------------------------------------------------------
# Pincode geocode
# ---------------------------------------------------------------------------


class TestPincode:
    async def test_synthesizes_place(self, orchestrator, provider) -> None:
        orchestrator.update_pincode_text("110001")
        outcome = await orchestrator.search_pincode()

        reference = orchestrator.state.reference
        assert outcome.status == FlowStatus.OK
        assert reference is not None
        assert reference.name == "Location with Pincode 110001"
        assert reference.formatted_address == "New Delhi, Delhi 110001, India"
        assert reference.coordinate == NEW_DELHI
        assert orchestrator.state.pincode_text == ""

    async def test_geocode_restricted_to_india(self, orchestrator, provider) -> None:
        await orchestrator.search_pincode("110001")
        assert provider.calls_for("geocode") == [("geocode", "110001", "IN")]

    async def test_uses_first_result(self, orchestrator, provider) -> None:
        provider.geocode_results.append(
            provider.geocode_results[0].model_copy(update={"coordinate": GURUGRAM})
        )
        await orchestrator.search_pincode("110001")
        assert orchestrator.state.reference.coordinate == NEW_DELHI

    async def test_empty_pincode_issues_no_request(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        before = orchestrator.state.reference

        outcome = await orchestrator.search_pincode("   ")

        assert outcome.status == FlowStatus.SKIPPED
        assert provider.calls_for("geocode") == []
        assert orchestrator.state.reference == before

    async def test_failure_sets_reference_absent(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        provider.errors["geocode"] = ProviderError("geocode", "ZERO_RESULTS")

        outcome = await orchestrator.search_pincode("999999")

        assert outcome.status == FlowStatus.FAILED
        assert orchestrator.state.reference is None
        assert orchestrator.state.pincode_text == "999999"

    async def test_no_results_is_failure(self, orchestrator, provider) -> None:
        provider.geocode_results = []
        outcome = await orchestrator.search_pincode("110001")
        assert outcome.status == FlowStatus.FAILED
        assert orchestrator.state.reference is None


# ---------------------------------------------------------------------------
# Nearby search
# ---------------------------------------------------------------------------


class TestNearbySearch:
    async def test_requires_reference(self, orchestrator, provider) -> None:
        outcome = await orchestrator.find_nearby(PlaceCategory.HOSPITAL)
        assert outcome.status == FlowStatus.SKIPPED
        assert provider.calls_for("nearby_search") == []
        assert orchestrator.state.active_category is None

    async def test_ranks_results_in_provider_order(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        outcome = await orchestrator.find_nearby(PlaceCategory.HOSPITAL)

        state = orchestrator.state
        assert outcome.ok
        assert state.active_category == PlaceCategory.HOSPITAL
        assert [r.place_id for r in state.results] == ["h-1", "h-2"]
        assert 13.5 < state.results[0].distance_km < 15.5
        assert 23.5 < state.results[1].distance_km < 25.5
        assert [m.name for m in state.markers] == ["North Delhi Hospital", "Gurugram Hospital"]

    async def test_request_uses_fixed_radius(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        await orchestrator.find_nearby(PlaceCategory.PARK)
        assert provider.calls_for("nearby_search") == [
            ("nearby_search", NEW_DELHI, 20_000, PlaceCategory.PARK)
        ]

    async def test_accepts_category_value(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        await orchestrator.find_nearby("train_station")  # type: ignore[arg-type]
        assert orchestrator.state.active_category == PlaceCategory.TRAIN_STATION

    async def test_failure_clears_results_and_markers(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        await orchestrator.find_nearby(PlaceCategory.HOSPITAL)
        assert orchestrator.state.markers

        provider.errors["nearby_search"] = ProviderError("nearby_search", "OVER_QUERY_LIMIT")
        outcome = await orchestrator.find_nearby(PlaceCategory.SCHOOL)

        assert outcome.status == FlowStatus.FAILED
        assert orchestrator.state.results is None
        assert orchestrator.state.markers == ()

    async def test_empty_success_is_not_absent(self, orchestrator, provider) -> None:
        provider.nearby = []
        await _with_reference(orchestrator)
        await orchestrator.find_nearby(PlaceCategory.SHOPPING_MALL)
        assert orchestrator.state.results == ()

    async def test_new_reference_resets_results(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        await orchestrator.find_nearby(PlaceCategory.HOSPITAL)

        await orchestrator.search_pincode("110001")

        state = orchestrator.state
        assert state.results is None
        assert state.markers == ()
        assert state.active_category is None

    async def test_results_for_old_reference_dropped(self, orchestrator, provider) -> None:
        await _with_reference(orchestrator)
        gate = asyncio.Event()
        provider.gates["nearby_search"] = gate

        pending = asyncio.create_task(orchestrator.find_nearby(PlaceCategory.HOSPITAL))
        await asyncio.sleep(0)
        await orchestrator.search_pincode("110001")
        gate.set()

        assert (await pending).status == FlowStatus.STALE
        assert orchestrator.state.results is None
        assert orchestrator.state.reference.name == "Location with Pincode 110001"

    async def test_custom_radius(self, provider) -> None:
        orchestrator = SearchOrchestrator(provider, radius_meters=5_000)
        await _with_reference(orchestrator)
        await orchestrator.find_nearby(PlaceCategory.SCHOOL)
        assert provider.calls_for("nearby_search")[0][2] == 5_000


class TestInitialState:
    def test_starts_empty(self, orchestrator) -> None:
        assert orchestrator.state == SearchState()

    def test_accepts_seed_state(self, provider) -> None:
        seed = SearchState(
            reference=Place(name="Seed", coordinate=NEW_DELHI),
        )
        assert SearchOrchestrator(provider, state=seed).state.reference.name == "Seed"
