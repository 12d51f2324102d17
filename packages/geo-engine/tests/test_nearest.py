import math

import pytest

from geo_engine.distance import EARTH_RADIUS_KM
from geo_engine.errors import InvalidCoordinate, InvalidLimit
from geo_engine.models import Center, GeoPoint
from geo_engine.nearest import DEFAULT_NEAREST_LIMIT, nearest

ORIGIN = GeoPoint(lat=0, lng=0)
KM_PER_DEGREE = math.radians(1) * EARTH_RADIUS_KM


def _on_equator(center_id: str, km: float, active: bool = True) -> Center:
    return Center(center_id=center_id, lat=0, lng=km / KM_PER_DEGREE, active=active)


def test_nearest_returns_closest_in_order() -> None:
    candidates = [_on_equator(f"c{km}", km) for km in (3, 1, 5, 2, 4)]

    result = nearest(ORIGIN, candidates, limit=2)

    assert [item.center_id for item in result] == ["c1", "c2"]
    assert result[0].distance == pytest.approx(1.0)
    assert result[1].distance == pytest.approx(2.0)


def test_nearest_defaults_to_five() -> None:
    candidates = [_on_equator(f"c{km}", km) for km in range(1, 9)]

    result = nearest(ORIGIN, candidates)

    assert DEFAULT_NEAREST_LIMIT == 5
    assert len(result) == 5


@pytest.mark.parametrize("limit", [1, 3, 10])
def test_nearest_length_is_min_of_limit_and_active_count(limit: int) -> None:
    candidates = [_on_equator(f"c{km}", km, active=km % 2 == 0) for km in range(1, 9)]

    result = nearest(ORIGIN, candidates, limit=limit)

    assert len(result) == min(limit, 4)
    assert all(item.center.active for item in result)
    assert [item.distance for item in result] == sorted(item.distance for item in result)


def test_inactive_center_is_skipped_even_when_closest() -> None:
    candidates = [_on_equator("closed", 0, active=False), _on_equator("open", 50)]

    result = nearest(ORIGIN, candidates, limit=1)

    assert [item.center_id for item in result] == ["open"]


def test_nearest_has_no_radius_bound() -> None:
    far = Center(center_id="far", lat=0, lng=180)
    assert [item.center_id for item in nearest(ORIGIN, [far])] == ["far"]


def test_nearest_is_deterministic_for_ties() -> None:
    candidates = [Center(center_id="east", lat=0, lng=1), Center(center_id="north", lat=1, lng=0)]

    first = nearest(ORIGIN, candidates, limit=2)
    second = nearest(ORIGIN, candidates, limit=2)

    assert [item.center_id for item in first] == ["east", "north"]
    assert first == second


def test_nearest_with_empty_snapshot() -> None:
    assert nearest(ORIGIN, [], limit=3) == []


@pytest.mark.parametrize("limit", [0, -1, 2.5, True, "3"])
def test_invalid_limit_raises(limit) -> None:
    with pytest.raises(InvalidLimit):
        nearest(ORIGIN, [_on_equator("c1", 1)], limit=limit)


def test_invalid_origin_raises() -> None:
    with pytest.raises(InvalidCoordinate):
        nearest(GeoPoint(lat=0, lng=-181), [_on_equator("c1", 1)])
