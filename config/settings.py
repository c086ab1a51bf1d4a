"""Application settings loaded from environment variables.

Uses pydantic-settings for validation and type coercion. App-specific
settings use the ``NIKATKHOJ_`` prefix; the Google Maps key and logging
settings use their canonical environment variable names via
``validation_alias``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Central configuration for the NikatKhoj service.

    Environment variables are loaded from a ``.env`` file when present.
    """

    model_config = SettingsConfigDict(
        env_prefix="NIKATKHOJ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ── App ────────────────────────────────────────────────────────────
    env: Literal["development", "production"] = "development"

    # ── Google Maps Platform ───────────────────────────────────────────
    google_maps_api_key: str = Field(default="", validation_alias="GOOGLE_MAPS_API_KEY")
    places_base_url: str = "https://maps.googleapis.com/maps/api"
    provider_timeout_seconds: float = Field(default=10.0, gt=0)
    provider_max_attempts: int = Field(default=2, ge=1)

    # ── Search ─────────────────────────────────────────────────────────
    # Every provider call is restricted to this one country.
    country_code: Literal["in"] = "in"
    nearby_radius_meters: int = Field(default=20_000, gt=0, le=50_000)

    # ── Sessions ───────────────────────────────────────────────────────
    session_max_count: int = Field(default=1_000, ge=1)
    session_idle_ttl_seconds: int = Field(default=1_800, ge=1)  # 30 minutes

    # ── Map view ───────────────────────────────────────────────────────
    map_default_lat: float = Field(default=20.5937, ge=-90, le=90)  # centre of India
    map_default_lng: float = Field(default=78.9629, ge=-180, le=180)
    map_zoom: int = Field(default=14, ge=0, le=21)

    # ── API ────────────────────────────────────────────────────────────
    api_host: str = Field(default="0.0.0.0", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")
    cors_origins: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # ── Logging ────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )
    log_format: Literal["json", "console"] = Field(default="json", validation_alias="LOG_FORMAT")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value

    # ── Derived Properties ─────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def has_provider_key(self) -> bool:
        return bool(self.google_maps_api_key)


# Module-level singleton; import ``settings`` everywhere.
settings = Settings()
