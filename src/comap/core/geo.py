from __future__ import annotations
from dataclasses import dataclass
from math import atan2, cos, isfinite, radians, sin, sqrt
from typing import Iterable

"""
Geospatial helpers.

Distances use the haversine formula on a spherical Earth. At the scale of a
sensor grid (a few hundred meters) that is far more accurate than the sensors.
"""

EARTH_RADIUS_M = 6_371_000


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lon: float

    def is_finite(self) -> bool:
        return isfinite(self.lat) and isfinite(self.lon)


def haversine_m(a: GeoPoint, b: GeoPoint) -> float:
    """Compute great-circle distance in meters between two points."""
    lat1 = radians(a.lat)
    lon1 = radians(a.lon)
    lat2 = radians(b.lat)
    lon2 = radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Rounding can push h a hair past 1 for antipodal points.
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_M * 2 * atan2(sqrt(h), sqrt(1 - h))


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned lat/lon rectangle.

    Built from the min/max of a corner polygon, so a query can fall inside the
    box while lying outside the (possibly skewed) quadrilateral itself.
    """

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @classmethod
    def from_corners(cls, corners: Iterable[GeoPoint]) -> "BoundingBox":
        pts = list(corners)
        if not pts:
            raise ValueError("BoundingBox needs at least one corner")
        lats = [p.lat for p in pts]
        lons = [p.lon for p in pts]
        return cls(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))

    def contains(self, point: GeoPoint) -> bool:
        """Inclusive on every edge; non-finite points are never inside."""
        if not point.is_finite():
            return False
        return self.min_lat <= point.lat <= self.max_lat and self.min_lon <= point.lon <= self.max_lon

    def clamp(self, point: GeoPoint) -> GeoPoint:
        return GeoPoint(
            lat=min(self.max_lat, max(self.min_lat, point.lat)),
            lon=min(self.max_lon, max(self.min_lon, point.lon)),
        )

    @property
    def center(self) -> GeoPoint:
        return GeoPoint(lat=(self.min_lat + self.max_lat) / 2, lon=(self.min_lon + self.max_lon) / 2)


@dataclass(frozen=True)
class SamplePoint:
    """A measured value at a known location."""

    lat: float
    lon: float
    value: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lon=self.lon)

    def is_finite(self) -> bool:
        return isfinite(self.lat) and isfinite(self.lon) and isfinite(self.value)
