"""
Mock CO sensor feed.

Stands in for the real sensor gateway during demos and tests:
- stationary sensors report an urban-background ppm level with a slow drift,
  jitter and occasional spikes;
- one mobile sensor does a random walk inside the sensor bounding box,
  reflecting its heading off the edges.

Pass `seed` to make a run reproducible; timestamps then depend only on the `now`
values handed to `step`.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime

from comap.config.settings import Settings
from comap.core.geo import BoundingBox, GeoPoint
from comap.core.time import ensure_tz, epoch_ms, now_tz
from comap.sensors.feed import SensorReading, SensorSnapshot

logger = logging.getLogger(__name__)


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, x))


class SensorSimulator:
    def __init__(self, settings: Settings, *, seed: int | None = None):
        self._settings = settings
        self._sim = settings.simulation
        self._tz = settings.app.timezone
        self._rng = random.Random(seed if seed is not None else settings.sensors.seed)
        self._station_ids = list(settings.sensors.stations)
        self._mobile_id = settings.sensors.mobile_id
        self._bounds: BoundingBox = settings.sensors.bounding_box()
        self._time_offset_ms = self._rng.random() * 1000 * 1000

        start = settings.sensors.mobile_start_between
        if start:
            pts = [settings.sensors.stations[s] for s in start]
            origin = GeoPoint(lat=sum(p.lat for p in pts) / len(pts), lon=sum(p.lon for p in pts) / len(pts))
        else:
            origin = self._bounds.center
        self._position = origin
        self._heading = self._rng.random() * math.pi * 2

    @property
    def position(self) -> GeoPoint:
        return self._position

    @property
    def heading(self) -> float:
        return self._heading

    @property
    def bounds(self) -> BoundingBox:
        return self._bounds

    def generate_ppm(self, base: float, t_ms: float, jitter: float) -> float:
        sim = self._sim
        diurnal = sim.diurnal_amplitude * math.sin(t_ms / sim.diurnal_period_ms)
        noise = (self._rng.random() - 0.5) * jitter
        spike = sim.spike_magnitude * self._rng.random() if self._rng.random() < sim.spike_probability else 0.0
        return _clamp(base + diurnal + noise + spike, sim.value_min, sim.value_max)

    def step_mobile(self) -> GeoPoint:
        """Move the mobile sensor one step, reflecting off the bounding box."""
        sim = self._sim
        lat, lon, heading = self._position.lat, self._position.lon, self._heading
        m_per_deg_lat = sim.meters_per_degree
        m_per_deg_lon = sim.meters_per_degree * math.cos(math.radians(lat))

        next_lat = lat + math.sin(heading) * sim.speed_m_per_step / m_per_deg_lat
        next_lon = lon + math.cos(heading) * sim.speed_m_per_step / m_per_deg_lon

        b = self._bounds
        if next_lat < b.min_lat or next_lat > b.max_lat:
            heading = -heading
            next_lat = _clamp(next_lat, b.min_lat, b.max_lat)
        if next_lon < b.min_lon or next_lon > b.max_lon:
            heading = math.pi - heading
            next_lon = _clamp(next_lon, b.min_lon, b.max_lon)

        heading += (self._rng.random() - 0.5) * sim.heading_wander_rad
        self._position = GeoPoint(lat=next_lat, lon=next_lon)
        self._heading = heading
        return self._position

    def step(self, now: datetime | None = None) -> SensorSnapshot:
        """Advance one tick and return the readings for every sensor."""
        now = ensure_tz(now, self._tz) if now is not None else now_tz(self._tz)
        t = epoch_ms(now) + self._time_offset_ms
        sim = self._sim

        position = self.step_mobile()

        readings: dict[str, SensorReading] = {}
        for idx, sensor_id in enumerate(self._station_ids):
            base = sim.station_base + (idx % 8) * sim.station_base_step
            value = self.generate_ppm(base, t + idx * sim.station_time_offset_ms, sim.station_jitter)
            readings[sensor_id] = SensorReading(value=value, timestamp=now, online=True)

        readings[self._mobile_id] = SensorReading(
            value=self.generate_ppm(sim.mobile_base, t + sim.mobile_time_offset_ms, sim.mobile_jitter),
            timestamp=now,
            online=True,
            lat=position.lat,
            lon=position.lon,
        )
        logger.debug("Simulated %d readings; mobile at %.6f, %.6f", len(readings), position.lat, position.lon)
        return SensorSnapshot(readings=readings, generated_at=now)
