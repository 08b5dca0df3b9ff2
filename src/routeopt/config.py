"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="ROUTEOPT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Traffic-Aware Route Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level for the service.")
    osrm_base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile to use when computing travel times.",
    )
    osrm_timeout_seconds: float = Field(default=5.0, gt=0.0, description="Per-call timeout for segment requests.")
    osrm_max_retries: int = Field(default=2, ge=0)
    osrm_backoff_seconds: float = Field(default=0.5, ge=0.0)
    tomtom_base_url: str = Field(default="https://api.tomtom.com")
    tomtom_api_key: Optional[str] = Field(
        default=None,
        description="TomTom API key used for live traffic flow samples.",
    )
    tomtom_timeout_seconds: float = Field(default=5.0, gt=0.0)
    use_live_traffic: bool = Field(
        default=True,
        description="Fetch live speed samples before building the matrix when a TomTom key is configured.",
    )
    max_parallel_requests: int = Field(default=16, ge=1, description="Worker threads for the pairwise matrix fan-out.")
    traffic_speed_ttl_minutes: float = Field(default=15.0, gt=0.0)
    traffic_time_ttl_minutes: float = Field(default=15.0, gt=0.0)
    route_ttl_minutes: float = Field(default=30.0, gt=0.0)
    distance_weight: float = Field(default=0.4, ge=0.0)
    traffic_weight: float = Field(default=0.6, ge=0.0)
    max_fallback_delay_minutes: float = Field(default=5.0, ge=0.0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
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

    @field_validator("osrm_base_url", "tomtom_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.rstrip("/")


settings = Settings()
