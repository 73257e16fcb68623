"""Loading and validation of the TOML settings file."""
from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from cargotrack.geo.provider import DEFAULT_ENDPOINT, DEFAULT_USER_AGENT, MAX_RESULT_LIMIT

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")

ENV_OVERRIDES = {
    "CARGOTRACK_GEOCODER_ENDPOINT": "endpoint",
    "CARGOTRACK_GEOCODER_USER_AGENT": "user_agent",
}


class GeocodingSettings(BaseModel):
    """Validated ``[geocoding]`` section."""

    endpoint: str = Field(default=DEFAULT_ENDPOINT, min_length=1)
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    timeout_seconds: float = Field(default=5.0, gt=0)
    result_limit: int = Field(default=MAX_RESULT_LIMIT, ge=1, le=MAX_RESULT_LIMIT)
    min_interval_ms: int = Field(default=100, ge=0)
    match_strategy: str = Field(default="substring", pattern=r"^(substring|exact)$")
    max_cache_entries: Optional[int] = Field(default=None, gt=0)

    @property
    def min_interval_seconds(self) -> float:
        return self.min_interval_ms / 1000.0


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> Dict[str, object]:
    """Read the TOML configuration file."""
    with path.open("rb") as handle:
        return tomllib.load(handle)


def geocoding_settings(settings: Dict[str, object]) -> GeocodingSettings:
    """Build GeocodingSettings from loaded settings plus environment overrides."""
    section = dict(settings.get("geocoding", {}) or {})
    for env_name, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            section[key] = value
    try:
        return GeocodingSettings(**section)
    except ValidationError as exc:
        raise ValueError(f"Invalid geocoding settings: {exc}") from exc


def load_geocoding_settings(path: Path = DEFAULT_SETTINGS_PATH) -> GeocodingSettings:
    """Load the settings file when present, falling back to defaults."""
    settings = load_settings(path) if path.exists() else {}
    return geocoding_settings(settings)
