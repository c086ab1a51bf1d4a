"""NikatKhoj FastAPI application entry point.

Creates the FastAPI app, configures middleware, includes routers, and
manages the lifecycle of the places client and the search session
registry.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from config.settings import settings
from src.api.router import api_router
from src.models.place import Coordinate

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Structured logging configuration
# ---------------------------------------------------------------------------


def _configure_logging() -> None:
    """Set up structlog with JSON or console rendering based on settings."""
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.log_level],
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup and shutdown of the search services.

    On startup:
      1. Create the Google Maps places client
      2. Create the session registry around it
      3. Store both, plus map view defaults, on ``app.state``

    On shutdown:
      - Close the places client's HTTP connections.
    """
    _configure_logging()
    logger.info(
        "app.startup",
        env=settings.env,
        country=settings.country_code,
        nearby_radius_m=settings.nearby_radius_meters,
    )

    app.state.start_time = time.time()

    # -- 1. Places provider ---------------------------------------------------
    from src.services.places_client import GooglePlacesClient

    if not settings.has_provider_key:
        logger.warning("app.places_api_key_missing", note="provider calls will fail with REQUEST_DENIED")

    places_client = GooglePlacesClient(
        settings.google_maps_api_key,
        base_url=settings.places_base_url,
        timeout_seconds=settings.provider_timeout_seconds,
        max_attempts=settings.provider_max_attempts,
    )
    app.state.places_client = places_client
    app.state.provider_key_configured = settings.has_provider_key
    logger.info("app.places_client_initialised")

    # -- 2. Session registry --------------------------------------------------
    from src.services.sessions import SessionRegistry

    app.state.sessions = SessionRegistry(
        places_client,
        max_sessions=settings.session_max_count,
        idle_ttl_seconds=settings.session_idle_ttl_seconds,
        country=settings.country_code,
        radius_meters=settings.nearby_radius_meters,
    )
    logger.info("app.sessions_initialised", max_sessions=settings.session_max_count)

    # -- 3. View defaults -----------------------------------------------------
    app.state.view_defaults = {
        "initial_center": Coordinate(lat=settings.map_default_lat, lng=settings.map_default_lng),
        "zoom": settings.map_zoom,
    }

    logger.info("app.startup_complete")

    yield

    # -- Shutdown -----------------------------------------------------------
    logger.info("app.shutdown_start")
    await places_client.close()
    logger.info("app.shutdown_complete")


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="NikatKhoj API",
    description=(
        "NikatKhoj (निकट खोज) -- find a location in India by autocomplete or "
        "pincode and list nearby schools, hospitals, parks, malls and stations "
        "by straight-line distance."
    ),
    version="0.1.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# -- CORS middleware --------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

# -- Include routers -------------------------------------------------------
app.include_router(api_router)


@app.get("/api", response_class=ORJSONResponse)
async def api_info() -> dict:
    """API information endpoint."""
    return {
        "name": "NikatKhoj API",
        "description": "Location search and nearby places for India",
        "version": app.version,
        "docs": "/docs",
        "health": "/api/v1/health",
        "country": settings.country_code,
        "nearby_radius_m": settings.nearby_radius_meters,
        "endpoints": {
            "health": "/api/v1/health",
            "categories": "/api/v1/places/categories",
            "distance": "/api/v1/places/distance",
            "rank": "/api/v1/places/rank",
            "sessions": "/api/v1/sessions",
        },
    }

