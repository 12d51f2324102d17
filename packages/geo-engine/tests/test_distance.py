import math

import pytest

from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km
from geo_engine.errors import InvalidCoordinate
from geo_engine.models import GeoPoint

COLOMBO = GeoPoint(lat=6.9271, lng=79.8612)
KANDY = GeoPoint(lat=7.2906, lng=80.6337)


def test_haversine_distance_is_zero_for_same_point() -> None:
    assert haversine_distance_km(COLOMBO, COLOMBO) == 0.0


def test_haversine_distance_is_positive_for_different_points() -> None:
    distance = haversine_distance_km(COLOMBO, KANDY)
    assert 90 < distance < 100


def test_haversine_distance_is_symmetric() -> None:
    points = [
        COLOMBO,
        KANDY,
        GeoPoint(lat=0, lng=0),
        GeoPoint(lat=-33.8688, lng=151.2093),
        GeoPoint(lat=89.9, lng=-179.9),
        GeoPoint(lat=-90, lng=180),
    ]
    for start in points:
        for end in points:
            assert haversine_distance_km(start, end) == haversine_distance_km(end, start)


def test_one_degree_along_equator_is_about_111_km() -> None:
    distance = haversine_distance_km(GeoPoint(lat=0, lng=0), GeoPoint(lat=0, lng=1))
    assert distance == pytest.approx(111.19, abs=0.01)


def test_antipodal_points_do_not_overshoot_asin() -> None:
    distance = haversine_distance_km(GeoPoint(lat=0, lng=0), GeoPoint(lat=0, lng=180))
    assert not math.isnan(distance)
    assert distance == pytest.approx(math.pi * EARTH_RADIUS_KM)


@pytest.mark.parametrize(
    "point",
    [
        GeoPoint(lat=95, lng=0),
        GeoPoint(lat=-90.5, lng=0),
        GeoPoint(lat=0, lng=180.01),
        GeoPoint(lat=float("nan"), lng=0),
        GeoPoint(lat=0, lng=float("inf")),
    ],
)
def test_invalid_coordinate_raises(point: GeoPoint) -> None:
    with pytest.raises(InvalidCoordinate):
        haversine_distance_km(point, COLOMBO)
    with pytest.raises(InvalidCoordinate):
        haversine_distance_km(COLOMBO, point)


def test_invalid_coordinate_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        haversine_distance_km(GeoPoint(lat=95, lng=0), COLOMBO)
