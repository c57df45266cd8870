"""
Sensor feed records and resolution into kriging samples.

A feed snapshot maps sensor ids to readings. Readings that carry their own
latitude/longitude are mobile; all others are stationary and take their position
from the configured station table.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Mapping, Protocol

from comap.core.geo import GeoPoint, SamplePoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorReading:
    value: float
    timestamp: datetime
    online: bool = True
    lat: float | None = None
    lon: float | None = None

    @property
    def is_mobile(self) -> bool:
        return (
            self.lat is not None
            and self.lon is not None
            and math.isfinite(self.lat)
            and math.isfinite(self.lon)
        )

    @property
    def location(self) -> GeoPoint | None:
        if not self.is_mobile:
            return None
        return GeoPoint(lat=float(self.lat), lon=float(self.lon))


@dataclass(frozen=True)
class SensorSnapshot:
    readings: dict[str, SensorReading]
    generated_at: datetime

    @property
    def online_count(self) -> int:
        return sum(1 for r in self.readings.values() if r.online)

    @property
    def total_count(self) -> int:
        return len(self.readings)


@dataclass(frozen=True)
class StationarySensor:
    sensor_id: str
    location: GeoPoint
    reading: SensorReading


@dataclass(frozen=True)
class MobileSensor:
    sensor_id: str
    location: GeoPoint
    reading: SensorReading


@dataclass(frozen=True)
class ResolvedFeed:
    stationary: list[StationarySensor] = field(default_factory=list)
    mobile: list[MobileSensor] = field(default_factory=list)

    def samples(self) -> list[SamplePoint]:
        """Stationary readings that can feed the kriging engine."""
        return [
            SamplePoint(lat=s.location.lat, lon=s.location.lon, value=s.reading.value)
            for s in self.stationary
            if s.reading.online and math.isfinite(s.reading.value)
        ]

    def find_mobile(self, sensor_id: str) -> MobileSensor | None:
        wanted = sensor_id.strip().lower()
        for m in self.mobile:
            if m.sensor_id.lower() == wanted:
                return m
        return None


def split_feed(
    snapshot: SensorSnapshot,
    station_coords: Mapping[str, GeoPoint],
    *,
    fallback_location: GeoPoint | None = None,
) -> ResolvedFeed:
    """Separate mobile and stationary readings and attach stationary positions.

    Stationary ids missing from `station_coords` use `fallback_location`, or are
    skipped when none is configured.
    """
    stationary: list[StationarySensor] = []
    mobile: list[MobileSensor] = []

    for sensor_id, reading in sorted(snapshot.readings.items()):
        if reading.is_mobile:
            mobile.append(MobileSensor(sensor_id=sensor_id, location=reading.location, reading=reading))
            continue

        location = station_coords.get(sensor_id) or fallback_location
        if location is None:
            logger.debug("Skipping stationary sensor %s: no known position.", sensor_id)
            continue
        if not math.isfinite(reading.value):
            logger.debug("Skipping sensor %s: non-finite value.", sensor_id)
            continue
        stationary.append(StationarySensor(sensor_id=sensor_id, location=location, reading=reading))

    return ResolvedFeed(stationary=stationary, mobile=mobile)


class SnapshotSource(Protocol):
    def step(self, now: datetime | None = None) -> SensorSnapshot: ...


class LiveFeed:
    """Caches the latest snapshot and refreshes it at most every `refresh_seconds`.

    Refresh is lazy: the source is stepped when a caller asks for data and the
    cached snapshot is stale, so no background thread is needed.
    """

    def __init__(
        self,
        source: SnapshotSource,
        *,
        refresh_seconds: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if refresh_seconds <= 0:
            raise ValueError("refresh_seconds must be > 0")
        self._source = source
        self._refresh_seconds = float(refresh_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: SensorSnapshot | None = None
        self._taken_at: float | None = None
        self._listeners: list[Callable[[SensorSnapshot], None]] = []

    def subscribe(self, listener: Callable[[SensorSnapshot], None]) -> None:
        """Call `listener` with every new snapshot (under the feed lock)."""
        self._listeners.append(listener)

    def current(self) -> SensorSnapshot:
        with self._lock:
            now = self._clock()
            stale = self._taken_at is None or now - self._taken_at >= self._refresh_seconds
            if self._snapshot is None or stale:
                self._snapshot = self._source.step()
                self._taken_at = now
                for listener in self._listeners:
                    listener(self._snapshot)
            return self._snapshot
