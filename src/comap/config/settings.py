# src/comap/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/comap/config/defaults.yaml`, then optionally overridden by:
- an external YAML file via `COMAP_CONFIG_PATH` (replaces the packaged defaults)
- environment variables (`COMAP_LOG_LEVEL`, `COMAP_SEED`, `COMAP_REFRESH_SECONDS`)

Design rule:
- Tuning knobs live in YAML, not hard-coded in business logic.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any
from comap.core.env import load_dotenv_if_present

import yaml
from pydantic import BaseModel, Field, model_validator

from comap.core.geo import BoundingBox, GeoPoint


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `comap.config`."""
    text = resources.files("comap.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "COMap"
    timezone: str = "Asia/Jakarta"
    log_level: str = "INFO"


class KrigingSettings(BaseModel):
    nugget: float = Field(0.1, ge=0)
    sill: float = Field(1.0, gt=0)
    range_m: float = Field(1000.0, gt=0)
    range_factor: float = Field(0.7, gt=0)
    sill_floor: float = Field(0.1, gt=0)
    min_samples: int = Field(2, ge=1)


class StationCoordinate(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class SensorSettings(BaseModel):
    stations: dict[str, StationCoordinate] = Field(default_factory=dict)
    mobile_id: str = "mobile1"
    bounds_corners: list[str] = Field(default_factory=list)
    mobile_start_between: list[str] = Field(default_factory=list)
    refresh_seconds: float = Field(2.0, gt=0)
    trail_max_points: int = Field(50, ge=1)
    seed: int | None = None
    fallback_location: StationCoordinate | None = None

    @model_validator(mode="after")
    def _validate_references(self) -> "SensorSettings":
        for key in [*self.bounds_corners, *self.mobile_start_between]:
            if key not in self.stations:
                raise ValueError(f"Unknown station id '{key}' referenced in sensor settings")
        if len(self.bounds_corners) < 2:
            raise ValueError("bounds_corners must name at least two stations")
        return self

    def station_points(self) -> dict[str, GeoPoint]:
        return {sid: GeoPoint(lat=c.lat, lon=c.lon) for sid, c in self.stations.items()}

    def corner_points(self) -> list[GeoPoint]:
        return [GeoPoint(lat=self.stations[s].lat, lon=self.stations[s].lon) for s in self.bounds_corners]

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_corners(self.corner_points())


class SimulationSettings(BaseModel):
    speed_m_per_step: float = Field(8.0, ge=0)
    meters_per_degree: float = 111_320.0
    heading_wander_rad: float = Field(0.2, ge=0)
    value_min: float = 1.0
    value_max: float = 150.0
    diurnal_amplitude: float = 5.0
    diurnal_period_ms: float = Field(60_000.0, gt=0)
    spike_probability: float = Field(0.03, ge=0, le=1)
    spike_magnitude: float = Field(30.0, ge=0)
    station_base: float = 12.0
    station_base_step: float = 2.0
    station_jitter: float = Field(6.0, ge=0)
    station_time_offset_ms: float = 1234.0
    mobile_base: float = 15.0
    mobile_jitter: float = Field(10.0, ge=0)
    mobile_time_offset_ms: float = 8888.0


class OverrideSettings(BaseModel):
    radius_m: float = Field(100.0, ge=0)


class SeverityBand(BaseModel):
    name: str
    upper: float | None = None
    color: str


class SeveritySettings(BaseModel):
    bands: list[SeverityBand] = Field(
        default_factory=lambda: [
            SeverityBand(name="Safe", upper=9, color="#22c55e"),
            SeverityBand(name="Moderate", upper=35, color="#eab308"),
            SeverityBand(name="Unhealthy", upper=100, color="#f97316"),
            SeverityBand(name="Dangerous", upper=None, color="#ef4444"),
        ]
    )

    @model_validator(mode="after")
    def _validate_order(self) -> "SeveritySettings":
        if not self.bands:
            raise ValueError("severity.bands must not be empty")
        uppers = [b.upper for b in self.bands[:-1]]
        if any(u is None for u in uppers):
            raise ValueError("Only the last severity band may be open-ended")
        if uppers != sorted(uppers):
            raise ValueError("severity.bands must be ordered by upper bound")
        if self.bands[-1].upper is not None:
            raise ValueError("The last severity band must be open-ended (upper: null)")
        return self


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    kriging: KrigingSettings = Field(default_factory=KrigingSettings)
    sensors: SensorSettings
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    override: OverrideSettings = Field(default_factory=OverrideSettings)
    severity: SeveritySettings = Field(default_factory=SeveritySettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("COMAP_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    seed = os.getenv("COMAP_SEED")
    if seed:
        data.setdefault("sensors", {})["seed"] = int(seed)

    refresh = os.getenv("COMAP_REFRESH_SECONDS")
    if refresh:
        data.setdefault("sensors", {})["refresh_seconds"] = float(refresh)

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("COMAP_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
