from __future__ import annotations

from dataclasses import dataclass
import math

from geo_engine.distance import EARTH_RADIUS_KM
from geo_engine.models import MAX_LAT, MIN_LAT, GeoPoint, validate_point
from geo_engine.proximity import validate_radius

# absorbs floating-point error at the box edges
_MARGIN_DEG = 1e-6


@dataclass(frozen=True)
class BoundingBox:
    """Coarse lat/lng window for pre-filtering candidates in the store.

    ``min_lng``/``max_lng`` are ``None`` when the window would reach a pole or
    wrap across the antimeridian; only the latitude band applies then.
    """

    min_lat: float
    max_lat: float
    min_lng: float | None = None
    max_lng: float | None = None

    @property
    def bounds_longitude(self) -> bool:
        return self.min_lng is not None and self.max_lng is not None

    def contains(self, point: GeoPoint) -> bool:
        if point.lat < self.min_lat or point.lat > self.max_lat:
            return False
        if not self.bounds_longitude:
            return True
        return self.min_lng <= point.lng <= self.max_lng


def bounding_box(origin: GeoPoint, radius_km: float) -> BoundingBox:
    """Smallest lat/lng window guaranteed to hold every point within ``radius_km``."""
    validate_point(origin)
    radius_km = validate_radius(radius_km)
    angular = radius_km / EARTH_RADIUS_KM
    delta_lat = math.degrees(angular) + _MARGIN_DEG
    min_lat = max(MIN_LAT, origin.lat - delta_lat)
    max_lat = min(MAX_LAT, origin.lat + delta_lat)
    if min_lat <= MIN_LAT or max_lat >= MAX_LAT:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)

    ratio = math.sin(angular) / math.cos(math.radians(origin.lat))
    if ratio >= 1:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)
    delta_lng = math.degrees(math.asin(ratio)) + _MARGIN_DEG
    min_lng = origin.lng - delta_lng
    max_lng = origin.lng + delta_lng
    if min_lng < -180 or max_lng > 180:
        return BoundingBox(min_lat=min_lat, max_lat=max_lat)
    return BoundingBox(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)
