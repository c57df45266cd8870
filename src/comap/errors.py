"""
Exception types shared across layers.

The interpolation engine raises `SingularMatrixError` internally and converts it
to an "unavailable" result at its public boundary. `OutOfBoundsError` subclasses
`ValueError` so the API maps it to a 400 like any other validation failure.
"""

from __future__ import annotations


class COMapError(Exception):
    """Base class for COMap errors."""


class SingularMatrixError(COMapError):
    """The kriging system has no unique solution (zero pivot or non-finite result)."""


class OutOfBoundsError(COMapError, ValueError):
    """A query point lies outside the configured sensor bounding box."""

    def __init__(self, lat: float, lon: float):
        super().__init__(f"Point ({lat:.6f}, {lon:.6f}) is outside the sensor bounds")
        self.lat = lat
        self.lon = lon
