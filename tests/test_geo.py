import math

import pytest

from comap.core.geo import BoundingBox, GeoPoint, haversine_m


def test_haversine_is_symmetric_and_zero_on_identity():
    a = GeoPoint(lat=-7.764729, lon=110.376655)
    b = GeoPoint(lat=-7.775635, lon=110.376152)

    assert haversine_m(a, b) == haversine_m(b, a)
    assert haversine_m(a, a) == 0
    assert haversine_m(a, b) > 0


def test_haversine_one_degree_of_latitude():
    # R * pi / 180 on a 6,371 km sphere.
    d = haversine_m(GeoPoint(lat=0, lon=0), GeoPoint(lat=1, lon=0))
    assert d == pytest.approx(6_371_000 * math.pi / 180, rel=1e-9)


def test_haversine_antipodal_points_stay_finite():
    d = haversine_m(GeoPoint(lat=0, lon=0), GeoPoint(lat=0, lon=180))
    assert d == pytest.approx(6_371_000 * math.pi, rel=1e-9)


def test_bounding_box_uses_min_max_of_corners_and_is_inclusive():
    box = BoundingBox.from_corners(
        [GeoPoint(lat=0, lon=0), GeoPoint(lat=1, lon=3), GeoPoint(lat=2, lon=1)]
    )
    assert (box.min_lat, box.max_lat, box.min_lon, box.max_lon) == (0, 2, 0, 3)

    assert box.contains(GeoPoint(lat=0, lon=0))
    assert box.contains(GeoPoint(lat=2, lon=3))
    # Inside the rectangle even though it is outside the triangle formed by the corners.
    assert box.contains(GeoPoint(lat=2, lon=0))
    assert not box.contains(GeoPoint(lat=2.0001, lon=1))
    assert not box.contains(GeoPoint(lat=1, lon=-0.0001))


def test_bounding_box_rejects_non_finite_points():
    box = BoundingBox.from_corners([GeoPoint(lat=0, lon=0), GeoPoint(lat=1, lon=1)])
    assert not box.contains(GeoPoint(lat=float("nan"), lon=0.5))
    assert not box.contains(GeoPoint(lat=0.5, lon=float("inf")))


def test_bounding_box_needs_corners():
    with pytest.raises(ValueError):
        BoundingBox.from_corners([])
