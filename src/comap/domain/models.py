"""
Domain models (Pydantic).

These types are the contract between the service layer and its callers
(HTTP API and CLI):
- inputs (`EstimateRequest`)
- the estimate at a clicked point (`PointEstimate`)
- the sensor overview a map front end draws (`SensorsOverview`)

Engine-internal values (`comap.core.geo.SamplePoint`, `VariogramParameters`) stay
plain dataclasses; these models wrap them at the boundary.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

EstimateSource = Literal["kriging", "single_sample", "mobile_override", "unavailable"]


class GeoPoint(BaseModel):
    """A geographic point in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class EstimateRequest(BaseModel):
    """Request an estimate at one point."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    settings_overrides: dict[str, Any] | None = None


class SeverityInfo(BaseModel):
    name: str
    color: str
    lower: float | None = None
    upper: float | None = None
    label: str | None = None


class ParametersInfo(BaseModel):
    """Variogram parameters that produced a kriging estimate."""

    nugget: float
    sill: float
    range_m: float
    model: str = "exponential"


class PointEstimate(BaseModel):
    """Estimated CO level at a query point.

    `value` is None when no estimate is available; callers must not show that as 0.
    """

    query: GeoPoint
    value: float | None
    source: EstimateSource
    severity: SeverityInfo | None = None
    parameters: ParametersInfo | None = None
    sample_count: int = 0
    override_sensor_id: str | None = None
    override_distance_m: float | None = None

    @property
    def available(self) -> bool:
        return self.value is not None


class SensorView(BaseModel):
    id: str
    lat: float
    lon: float
    value: float
    online: bool
    timestamp: datetime
    severity: SeverityInfo
    mobile: bool = False
    trail: list[GeoPoint] = Field(default_factory=list)


class SensorCounts(BaseModel):
    online: int
    total: int


class SensorsOverview(BaseModel):
    generated_at: datetime
    stationary: list[SensorView] = Field(default_factory=list)
    mobile: list[SensorView] = Field(default_factory=list)
    counts: SensorCounts


class BoundsInfo(BaseModel):
    corners: list[GeoPoint]
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
