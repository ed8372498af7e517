"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="WASTEROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Container Collection Route Planner API"
    api_prefix: str = "/api"
    container_source_url: str = Field(
        default="https://kmtgarbage.vercel.app/containers/",
        description="Endpoint returning the JSON array of container records.",
    )
    container_fetch_timeout_seconds: float = Field(default=10.0, gt=0.0)
    depot_latitude: float = Field(default=40.9765, ge=-90.0, le=90.0)
    depot_longitude: float = Field(default=28.8706, ge=-180.0, le=180.0)
    occupancy_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Containers at or above this occupancy ratio are collected.",
    )
    directions_base_url: str = Field(
        default="https://routes.googleapis.com/directions/v2:computeRoutes",
        description="Directions provider endpoint used to resolve road segments.",
    )
    directions_api_key: Optional[str] = Field(
        default=None,
        description="API key for the directions provider. Segments fall back to straight lines when unset.",
    )
    directions_travel_mode: str = Field(default="DRIVE")
    directions_routing_preference: str = Field(default="TRAFFIC_AWARE")
    directions_timeout_seconds: float = Field(default=15.0, gt=0.0)
    resolve_road_segments: bool = Field(
        default=True,
        description="Upgrade straight route legs to road geometry when a provider is configured.",
    )
    average_speed_kmh: float = Field(
        default=30.0,
        gt=0.0,
        description="Speed used to estimate durations for legs without provider data.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:8081",
            "http://127.0.0.1:8081",
            "http://localhost:19006",
            "http://127.0.0.1:19006",
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


settings = Settings()
