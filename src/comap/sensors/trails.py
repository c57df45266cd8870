from __future__ import annotations

from collections import deque

from comap.core.geo import GeoPoint
from comap.sensors.feed import SensorSnapshot


class TrailBuffer:
    """Recent positions per mobile sensor, oldest first."""

    def __init__(self, max_points: int = 50):
        if max_points < 1:
            raise ValueError("max_points must be >= 1")
        self._max_points = int(max_points)
        self._trails: dict[str, deque[GeoPoint]] = {}

    def add(self, sensor_id: str, point: GeoPoint) -> bool:
        """Append `point` unless it repeats the last one. Returns True if appended."""
        trail = self._trails.setdefault(sensor_id, deque(maxlen=self._max_points))
        if trail and trail[-1] == point:
            return False
        trail.append(point)
        return True

    def record(self, snapshot: SensorSnapshot) -> None:
        for sensor_id, reading in snapshot.readings.items():
            location = reading.location
            if location is not None:
                self.add(sensor_id, location)

    def get(self, sensor_id: str) -> list[GeoPoint]:
        return list(self._trails.get(sensor_id, ()))

    def __len__(self) -> int:
        return len(self._trails)
