"""Health check endpoints for NikatKhoj API v1.

Provides liveness and readiness probes.  Readiness checks that the
places provider is configured and the session registry is up; it does
not call the provider, so probes never spend API quota.
"""

from __future__ import annotations

import time

import structlog
from fastapi import APIRouter, Request
from pydantic import BaseModel

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Basic health check response."""

    status: str
    version: str
    uptime_seconds: float


class ReadinessResponse(BaseModel):
    """Readiness check response with individual component statuses."""

    status: str
    checks: dict[str, str]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Liveness probe.

    Returns 200 if the application process is running and able to
    handle requests.  Does *not* check downstream dependencies.
    """
    start_time: float = getattr(request.app.state, "start_time", time.time())
    uptime = time.time() - start_time

    return HealthResponse(
        status="healthy",
        version=request.app.version,
        uptime_seconds=round(uptime, 2),
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(request: Request) -> ReadinessResponse:
    """Readiness probe."""
    checks: dict[str, str] = {}
    all_ok = True

    # -- Places provider ---------------------------------------------------
    if getattr(request.app.state, "places_client", None) is None:
        checks["places_provider"] = "not_initialised"
        all_ok = False
    elif not getattr(request.app.state, "provider_key_configured", False):
        checks["places_provider"] = "missing_api_key"
        all_ok = False
    else:
        checks["places_provider"] = "ok"

    # -- Session registry --------------------------------------------------
    registry = getattr(request.app.state, "sessions", None)
    if registry is not None:
        checks["sessions"] = f"ok ({len(registry)} live)"
    else:
        checks["sessions"] = "not_initialised"
        all_ok = False

    status = "ready" if all_ok else "degraded"

    logger.info("health.readiness_check", status=status, checks=checks)

    return ReadinessResponse(status=status, checks=checks)
