import random

import pytest

from geo_engine.bbox import BoundingBox, bounding_box
from geo_engine.distance import haversine_distance_km
from geo_engine.errors import InvalidCoordinate, InvalidRadius
from geo_engine.models import GeoPoint

COLOMBO = GeoPoint(lat=6.9271, lng=79.8612)


def test_bounding_box_brackets_origin() -> None:
    box = bounding_box(COLOMBO, radius_km=50)

    assert box.bounds_longitude
    assert box.min_lat < COLOMBO.lat < box.max_lat
    assert box.min_lng < COLOMBO.lng < box.max_lng
    assert box.max_lat - box.min_lat == pytest.approx(2 * 50 / 111.19, rel=1e-3)


def test_bounding_box_never_drops_points_inside_radius() -> None:
    rng = random.Random(11)
    for origin in (COLOMBO, GeoPoint(lat=60, lng=10), GeoPoint(lat=-45, lng=-70)):
        box = bounding_box(origin, radius_km=200)
        for _ in range(500):
            point = GeoPoint(
                lat=max(-90.0, min(90.0, origin.lat + rng.uniform(-3, 3))),
                lng=origin.lng + rng.uniform(-6, 6),
            )
            if haversine_distance_km(origin, point) <= 200:
                assert box.contains(point)


def test_bounding_box_drops_longitude_near_pole() -> None:
    box = bounding_box(GeoPoint(lat=89.5, lng=0), radius_km=100)

    assert not box.bounds_longitude
    assert box.max_lat == 90
    assert box.contains(GeoPoint(lat=89.6, lng=179))


def test_bounding_box_drops_longitude_across_antimeridian() -> None:
    box = bounding_box(GeoPoint(lat=0, lng=179.9), radius_km=100)

    assert not box.bounds_longitude
    assert box.contains(GeoPoint(lat=0, lng=-179.9))


def test_bounding_box_contains_checks_latitude_band() -> None:
    box = BoundingBox(min_lat=0, max_lat=1)
    assert box.contains(GeoPoint(lat=0.5, lng=120))
    assert not box.contains(GeoPoint(lat=1.5, lng=0))


def test_bounding_box_validates_inputs() -> None:
    with pytest.raises(InvalidCoordinate):
        bounding_box(GeoPoint(lat=95, lng=0), radius_km=10)
    with pytest.raises(InvalidRadius):
        bounding_box(COLOMBO, radius_km=0)
