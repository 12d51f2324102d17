from __future__ import annotations

from collections.abc import Iterable
import math

from geo_engine.distance import haversine_distance_km
from geo_engine.errors import InvalidRadius
from geo_engine.models import Center, DistancedCenter, GeoPoint, validate_point


def validate_radius(radius_km: float) -> float:
    if isinstance(radius_km, bool) or not isinstance(radius_km, (int, float)):
        raise InvalidRadius(f"radius_km must be a number, got {radius_km!r}")
    if not math.isfinite(radius_km) or radius_km <= 0:
        raise InvalidRadius(f"radius_km must be > 0, got {radius_km!r}")
    return float(radius_km)


def rank_by_distance(origin: GeoPoint, candidates: Iterable[Center]) -> list[DistancedCenter]:
    """Annotate active candidates with their distance from ``origin``, closest first.

    Inactive candidates are skipped. ``sorted`` is stable, so candidates at an
    equal distance keep their input order.
    """
    validate_point(origin)
    ranked = [
        DistancedCenter(center=center, distance=haversine_distance_km(origin, center.point))
        for center in candidates
        if center.active
    ]
    return sorted(ranked, key=lambda item: item.distance)


def filter_by_radius(
    origin: GeoPoint,
    radius_km: float,
    candidates: Iterable[Center],
) -> list[DistancedCenter]:
    radius_km = validate_radius(radius_km)
    return [item for item in rank_by_distance(origin, candidates) if item.distance <= radius_km]
