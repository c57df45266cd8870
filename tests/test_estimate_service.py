from datetime import datetime, timezone

import pytest

from comap.config.settings import get_settings
from comap.errors import OutOfBoundsError
from comap.sensors.feed import SensorReading, SensorSnapshot
from comap.sensors.trails import TrailBuffer
from comap.service.estimate import bounds_info, estimate_at_point, sensors_overview

NOW = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)

# sender5 sits well inside the bounding box.
QUERY_LAT = -7.771038
QUERY_LON = 110.378416
# 50 m north of the query (6,371 km sphere: 1 m = 1 / 111,194.93 deg of latitude).
FIFTY_M_DEG = 50 / 111_194.92664455873


def _snapshot(readings):
    return SensorSnapshot(readings=readings, generated_at=NOW)


def _stations(**values):
    return {sid: SensorReading(value=v, timestamp=NOW) for sid, v in values.items()}


def test_mobile_sensor_within_radius_overrides_kriging():
    settings = get_settings()
    readings = _stations(sender1=12.0, sender3=20.0)
    readings["mobile1"] = SensorReading(value=42.0, timestamp=NOW, lat=QUERY_LAT + FIFTY_M_DEG, lon=QUERY_LON)

    result = estimate_at_point(QUERY_LAT, QUERY_LON, _snapshot(readings), settings=settings)

    assert result.value == 42.0
    assert result.source == "mobile_override"
    assert result.override_sensor_id == "mobile1"
    assert result.override_distance_m == pytest.approx(50, abs=0.01)
    assert result.severity.name == "Unhealthy"


def test_mobile_sensor_outside_radius_is_ignored():
    settings = get_settings()
    readings = _stations(sender1=12.0, sender3=20.0)
    readings["mobile1"] = SensorReading(
        value=42.0, timestamp=NOW, lat=QUERY_LAT + 3 * FIFTY_M_DEG, lon=QUERY_LON
    )

    result = estimate_at_point(QUERY_LAT, QUERY_LON, _snapshot(readings), settings=settings)

    assert result.source == "kriging"
    assert 12.0 <= result.value <= 20.0
    assert result.parameters is not None
    assert result.parameters.sill == pytest.approx(16.0)


def test_mobile_override_needs_enough_stationary_samples():
    settings = get_settings()
    readings = _stations(sender1=12.0)
    readings["mobile1"] = SensorReading(value=42.0, timestamp=NOW, lat=QUERY_LAT, lon=QUERY_LON)

    result = estimate_at_point(QUERY_LAT, QUERY_LON, _snapshot(readings), settings=settings)

    assert result.source == "single_sample"
    assert result.value == 12.0


def test_offline_mobile_sensor_does_not_override():
    settings = get_settings()
    readings = _stations(sender1=12.0, sender3=20.0)
    readings["mobile1"] = SensorReading(value=42.0, timestamp=NOW, online=False, lat=QUERY_LAT, lon=QUERY_LON)

    result = estimate_at_point(QUERY_LAT, QUERY_LON, _snapshot(readings), settings=settings)
    assert result.source == "kriging"


def test_no_samples_is_unavailable_not_zero():
    settings = get_settings()
    result = estimate_at_point(QUERY_LAT, QUERY_LON, _snapshot({}), settings=settings)

    assert result.value is None
    assert result.source == "unavailable"
    assert result.severity is None
    assert not result.available


def test_estimate_at_station_matches_its_reading():
    settings = get_settings()
    station = settings.sensors.stations["sender2"]
    readings = _stations(sender1=12.0, sender2=31.5, sender3=20.0, sender7=8.0)

    result = estimate_at_point(station.lat, station.lon, _snapshot(readings), settings=settings)

    assert result.source == "kriging"
    assert result.value == pytest.approx(31.5, abs=1e-6)
    assert result.sample_count == 4


def test_out_of_bounds_query_never_reaches_the_engine(monkeypatch):
    import comap.service.estimate as service

    def fail(*args, **kwargs):
        raise AssertionError("kriging engine should not be called")

    monkeypatch.setattr(service, "interpolate", fail)
    settings = get_settings()
    readings = _stations(sender1=12.0, sender3=20.0)

    with pytest.raises(OutOfBoundsError):
        estimate_at_point(-7.7600, 110.3780, _snapshot(readings), settings=settings)
    with pytest.raises(ValueError):
        estimate_at_point(QUERY_LAT, 110.3900, _snapshot(readings), settings=settings)


def test_sensors_overview_includes_trails_and_counts():
    settings = get_settings()
    readings = _stations(sender1=5.0, sender2=50.0)
    readings["mobile1"] = SensorReading(value=120.0, timestamp=NOW, lat=QUERY_LAT, lon=QUERY_LON)
    snapshot = _snapshot(readings)
    trails = TrailBuffer()
    trails.record(snapshot)

    overview = sensors_overview(snapshot, settings=settings, trails=trails)

    assert [s.id for s in overview.stationary] == ["sender1", "sender2"]
    assert [s.severity.name for s in overview.stationary] == ["Safe", "Unhealthy"]
    assert overview.mobile[0].mobile
    assert overview.mobile[0].severity.name == "Dangerous"
    assert len(overview.mobile[0].trail) == 1
    assert overview.counts.online == 3
    assert overview.counts.total == 3


def test_bounds_info_matches_corner_stations():
    info = bounds_info(get_settings())
    assert len(info.corners) == 4
    assert info.min_lat == -7.775635
    assert info.max_lat == -7.764729
    assert info.min_lon == 110.373671
    assert info.max_lon == 110.382745
