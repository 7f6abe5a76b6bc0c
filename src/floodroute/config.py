"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FLOODROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Flood-Aware Route Advisor API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: str = Field(
        default="driving",
        description="OSRM profile used for base and detour route requests.",
    )
    osrm_max_retries: int = Field(default=3, ge=0)
    osrm_backoff_seconds: float = Field(default=1.0, ge=0.0)
    osrm_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # Hazard detection and scoring
    hazard_radius_meters: float = Field(default=500.0, gt=0.0)
    flood_penalty_multiplier: float = Field(
        default=50.0,
        ge=0.0,
        description="Weight of one meter of hazard exposure relative to one meter of distance.",
    )

    # Detour candidate generation
    detour_anchor_buffer_points: int = Field(default=5, ge=0)
    detour_offsets_degrees: tuple[float, ...] = Field(
        default=(0.002, 0.004, 0.006),
        description="Lateral offsets (degrees) applied on both sides of the anchor midpoint.",
    )
    detour_push_degrees: float = Field(default=0.006, gt=0.0)
    detour_anchor_min_separation_meters: float = Field(default=200.0, ge=0.0)

    # Detour acceptance
    flood_free_tolerance_meters: float = Field(default=50.0, ge=0.0)
    flood_free_max_distance_increase: float = Field(default=0.7, ge=0.0)
    partial_min_exposure_reduction: float = Field(default=0.3, ge=0.0, le=1.0)
    partial_max_distance_increase: float = Field(default=0.4, ge=0.0)
    best_effort_min_reduction_meters: float = Field(default=1.0, ge=0.0)
    detour_candidate_timeout_seconds: float = Field(default=20.0, gt=0.0)
    detour_max_parallel_requests: int = Field(default=7, ge=1)

    # Per-session detour state retention
    session_ttl_seconds: float = Field(default=3600.0, gt=0.0)
    session_max_entries: int = Field(default=10_000, ge=1)

    # Sensor reading classification (centimeters of water)
    reading_danger_level_cm: float = Field(default=20.0, ge=0.0)
    reading_warning_level_cm: float = Field(default=5.0, ge=0.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("detour_offsets_degrees", mode="before")
    @classmethod
    def _parse_float_tuple_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse float tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return tuple(float(item) for item in value)
        if isinstance(value, list):
            return tuple(float(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(float(item) for item in parsed)
                if isinstance(parsed, (int, float)):
                    return (float(parsed),)
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            if "," in value:
                return tuple(float(item.strip()) for item in value.split(",") if item.strip())
        return tuple()


settings = Settings()
