"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SALESTRACK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Sales Tracker API"
    api_prefix: str = "/api"

    routing_provider: Literal["mapbox", "osrm"] = Field(
        default="mapbox",
        description="Directions API flavour: hosted Mapbox or a self-hosted OSRM server.",
    )
    routing_base_url: str = Field(
        default="https://api.mapbox.com",
        description="Base URL of the directions service (Mapbox or a self-hosted OSRM instance).",
    )
    routing_access_token: Optional[str] = Field(
        default=None,
        description="Access token for the hosted directions service. Leave empty for self-hosted OSRM.",
    )
    routing_profile: Literal["driving", "driving-traffic", "walking", "cycling"] = Field(
        default="driving",
        description="Routing profile used when reconstructing travelled paths.",
    )
    routing_timeout_seconds: float = Field(default=10.0, gt=0.0)
    routing_max_retries: int = Field(default=0, ge=0)
    routing_backoff_seconds: float = Field(default=0.5, ge=0.0)

    max_waypoints_per_request: int = Field(default=25, ge=2)
    batch_size: int = Field(default=5, ge=2)
    batch_delay_seconds: float = Field(
        default=0.05,
        ge=0.0,
        description="Pause between consecutive batch requests to stay under the directions rate limit.",
    )
    min_waypoint_spacing_m: float = Field(default=30.0, ge=0.0)
    visit_threshold_m: float = Field(
        default=200.0,
        ge=0.0,
        description="Maximum distance between a tracked position and a customer for the visit to count.",
    )

    tracking_timezone: str = Field(
        default="Asia/Jakarta",
        description="IANA time zone whose midnight bounds a salesperson's working day.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
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
            # Try JSON first
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

    @field_validator("tracking_timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown time zone: {value}") from exc
        return value

    @field_validator("routing_access_token", "supabase_url", "supabase_key", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


settings = Settings()
