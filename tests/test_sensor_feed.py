from datetime import datetime, timezone

import pytest

from comap.core.geo import GeoPoint
from comap.sensors.feed import LiveFeed, SensorReading, SensorSnapshot, split_feed
from comap.sensors.trails import TrailBuffer

NOW = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)

COORDS = {
    "sender1": GeoPoint(lat=-7.764729, lon=110.376655),
    "sender2": GeoPoint(lat=-7.767512, lon=110.378690),
}


def _snapshot(readings):
    return SensorSnapshot(readings=readings, generated_at=NOW)


def test_split_feed_separates_mobile_and_stationary():
    snap = _snapshot(
        {
            "sender1": SensorReading(value=12.0, timestamp=NOW),
            "sender2": SensorReading(value=15.0, timestamp=NOW),
            "Mobile1": SensorReading(value=30.0, timestamp=NOW, lat=-7.77, lon=110.377),
            "unknown": SensorReading(value=99.0, timestamp=NOW),
        }
    )
    feed = split_feed(snap, COORDS)

    assert [s.sensor_id for s in feed.stationary] == ["sender1", "sender2"]
    assert feed.stationary[0].location == COORDS["sender1"]
    assert [m.sensor_id for m in feed.mobile] == ["Mobile1"]
    assert feed.find_mobile("mobile1").location == GeoPoint(lat=-7.77, lon=110.377)
    assert feed.find_mobile("mobile2") is None
    assert [s.value for s in feed.samples()] == [12.0, 15.0]


def test_split_feed_uses_fallback_location_for_unknown_stations():
    fallback = GeoPoint(lat=-7.775, lon=110.376)
    snap = _snapshot({"sender9": SensorReading(value=4.0, timestamp=NOW)})
    feed = split_feed(snap, COORDS, fallback_location=fallback)
    assert feed.stationary[0].location == fallback


def test_samples_skip_offline_and_non_finite_readings():
    snap = _snapshot(
        {
            "sender1": SensorReading(value=12.0, timestamp=NOW, online=False),
            "sender2": SensorReading(value=float("nan"), timestamp=NOW),
        }
    )
    feed = split_feed(snap, COORDS)
    assert feed.samples() == []
    assert snap.online_count == 1
    assert snap.total_count == 2


def test_reading_with_partial_position_is_stationary():
    r = SensorReading(value=1.0, timestamp=NOW, lat=-7.7, lon=None)
    assert not r.is_mobile
    assert r.location is None


class _CountingSource:
    def __init__(self):
        self.calls = 0

    def step(self, now=None):
        self.calls += 1
        return _snapshot({"sender1": SensorReading(value=float(self.calls), timestamp=NOW)})


def test_live_feed_refreshes_only_when_stale():
    clock = {"t": 0.0}
    source = _CountingSource()
    seen = []
    feed = LiveFeed(source, refresh_seconds=2.0, clock=lambda: clock["t"])
    feed.subscribe(seen.append)

    first = feed.current()
    clock["t"] = 1.5
    assert feed.current() is first
    clock["t"] = 2.0
    second = feed.current()

    assert second is not first
    assert source.calls == 2
    assert seen == [first, second]


def test_live_feed_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        LiveFeed(_CountingSource(), refresh_seconds=0)


def test_trail_skips_repeats_and_drops_oldest():
    trail = TrailBuffer(max_points=3)
    points = [GeoPoint(lat=0, lon=i) for i in range(5)]

    assert trail.add("mobile1", points[0])
    assert not trail.add("mobile1", points[0])
    for p in points[1:]:
        trail.add("mobile1", p)

    assert trail.get("mobile1") == points[2:]
    assert trail.get("mobile2") == []


def test_trail_records_mobile_readings_from_snapshot():
    trail = TrailBuffer()
    trail.record(
        _snapshot(
            {
                "sender1": SensorReading(value=1.0, timestamp=NOW),
                "mobile1": SensorReading(value=2.0, timestamp=NOW, lat=1.0, lon=2.0),
            }
        )
    )
    assert trail.get("mobile1") == [GeoPoint(lat=1.0, lon=2.0)]
    assert len(trail) == 1
