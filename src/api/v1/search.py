"""Search session endpoints.

A client creates a session, then drives the search flows against it:
typing in the search box, choosing a suggestion, entering a pincode and
pressing a category button.  Every flow endpoint answers with the flow
outcome, the new search state and the rendered view.

Provider failures never become HTTP errors; they show up as an outcome
with ``status == "failed"`` and a cleared slice of state.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel, Field

from src.models.enums import PlaceCategory
from src.models.state import FlowOutcome, SearchState
from src.services.presentation import SearchView, build_view
from src.services.sessions import SearchSession, SessionRegistry

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/sessions", tags=["search"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class SearchTextRequest(BaseModel):
    text: str = Field(default="", max_length=256)


class SelectSuggestionRequest(BaseModel):
    place_id: str = Field(..., max_length=512)
    description: str = Field(default="", max_length=512)


class PincodeTextRequest(BaseModel):
    text: str = Field(default="", max_length=32)


class PincodeSearchRequest(BaseModel):
    pincode: str | None = Field(
        default=None,
        max_length=32,
        description="Postal code to geocode; defaults to the stored pincode input",
    )


class SessionResponse(BaseModel):
    session_id: str
    state: SearchState
    view: SearchView


class FlowResponse(SessionResponse):
    outcome: FlowOutcome


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Search service not available")
    return registry


def _session(request: Request, session_id: str) -> SearchSession:
    session = _registry(request).get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return session


def _render(request: Request, session: SearchSession, *, sort_results: bool = False) -> SessionResponse:
    state = session.orchestrator.state
    view_defaults = getattr(request.app.state, "view_defaults", {})
    return SessionResponse(
        session_id=session.session_id,
        state=state,
        view=build_view(state, sort_results=sort_results, **view_defaults),
    )


def _flow_response(
    request: Request,
    session: SearchSession,
    outcome: FlowOutcome,
    *,
    sort_results: bool = False,
) -> FlowResponse:
    rendered = _render(request, session, sort_results=sort_results)
    return FlowResponse(**dict(rendered), outcome=outcome)


# ---------------------------------------------------------------------------
# Session lifecycle
# ---------------------------------------------------------------------------


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(request: Request) -> SessionResponse:
    """Start a new search session with an empty state."""
    session = _registry(request).create()
    return _render(request, session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str, request: Request, sort: bool = False
) -> SessionResponse:
    """Current state and view of a session."""
    return _render(request, _session(request, session_id), sort_results=sort)


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, request: Request) -> Response:
    if not _registry(request).remove(session_id):
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Flows
# ---------------------------------------------------------------------------


@router.post("/{session_id}/search-text", response_model=FlowResponse)
async def update_search_text(
    session_id: str, body: SearchTextRequest, request: Request
) -> FlowResponse:
    """Store the search box text and refresh autocomplete suggestions."""
    session = _session(request, session_id)
    outcome = await session.orchestrator.update_search_text(body.text)
    return _flow_response(request, session, outcome)


@router.post("/{session_id}/select", response_model=FlowResponse)
async def select_suggestion(
    session_id: str, body: SelectSuggestionRequest, request: Request
) -> FlowResponse:
    """Make a suggestion the reference location (Place Details lookup)."""
    session = _session(request, session_id)
    outcome = await session.orchestrator.select_suggestion(body.place_id, body.description)
    return _flow_response(request, session, outcome)


@router.put("/{session_id}/pincode-text", response_model=SessionResponse)
async def update_pincode_text(
    session_id: str, body: PincodeTextRequest, request: Request
) -> SessionResponse:
    """Store the pincode input without searching."""
    session = _session(request, session_id)
    session.orchestrator.update_pincode_text(body.text)
    return _render(request, session)


@router.post("/{session_id}/pincode", response_model=FlowResponse)
async def search_pincode(
    session_id: str, body: PincodeSearchRequest, request: Request
) -> FlowResponse:
    """Geocode a pincode and make it the reference location."""
    session = _session(request, session_id)
    outcome = await session.orchestrator.search_pincode(body.pincode)
    return _flow_response(request, session, outcome)


@router.post("/{session_id}/nearby/{category}", response_model=FlowResponse)
async def find_nearby(
    session_id: str,
    category: PlaceCategory,
    request: Request,
    sort: bool = False,
) -> FlowResponse:
    """Search one category around the reference location.

    Results keep the provider's order; pass ``sort=true`` to have the
    rendered result lines ordered nearest first.
    """
    session = _session(request, session_id)
    outcome = await session.orchestrator.find_nearby(category)
    return _flow_response(request, session, outcome, sort_results=sort)
