from datetime import datetime, timedelta, timezone

from comap.config.settings import get_settings
from comap.sensors.simulator import SensorSimulator

START = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)


def test_simulator_is_deterministic_with_a_seed():
    settings = get_settings()
    a = SensorSimulator(settings, seed=42)
    b = SensorSimulator(settings, seed=42)

    for i in range(5):
        now = START + timedelta(seconds=2 * i)
        assert a.step(now).readings == b.step(now).readings


def test_snapshot_contains_every_station_and_the_mobile_sensor():
    settings = get_settings()
    snap = SensorSimulator(settings, seed=1).step(START)

    stations = set(settings.sensors.stations)
    assert set(snap.readings) == stations | {settings.sensors.mobile_id}
    mobile = snap.readings[settings.sensors.mobile_id]
    assert mobile.is_mobile
    assert all(not snap.readings[s].is_mobile for s in stations)
    assert snap.generated_at == START
    assert snap.online_count == snap.total_count == len(stations) + 1


def test_values_stay_within_configured_range():
    settings = get_settings()
    sim = SensorSimulator(settings, seed=7)
    for i in range(200):
        snap = sim.step(START + timedelta(seconds=2 * i))
        for r in snap.readings.values():
            assert settings.simulation.value_min <= r.value <= settings.simulation.value_max


def test_mobile_walk_stays_inside_bounds_and_moves():
    settings = get_settings()
    sim = SensorSimulator(settings, seed=3)
    box = settings.sensors.bounding_box()
    start = sim.position

    positions = [sim.step(START + timedelta(seconds=2 * i)).readings["mobile1"].location for i in range(1000)]

    assert all(box.contains(p) for p in positions)
    assert positions[-1] != start
    assert len(set(positions)) > 1


def test_mobile_starts_between_configured_stations():
    settings = get_settings()
    sim = SensorSimulator(settings, seed=0)
    s1 = settings.sensors.stations["sender1"]
    s8 = settings.sensors.stations["sender8"]
    assert sim.position.lat == (s1.lat + s8.lat) / 2
    assert sim.position.lon == (s1.lon + s8.lon) / 2
