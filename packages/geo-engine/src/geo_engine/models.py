from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any

from geo_engine.errors import InvalidCoordinate

MIN_LAT = -90.0
MAX_LAT = 90.0
MIN_LNG = -180.0
MAX_LNG = 180.0


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


def validate_point(point: GeoPoint) -> GeoPoint:
    _validate_component("lat", point.lat, MIN_LAT, MAX_LAT)
    _validate_component("lng", point.lng, MIN_LNG, MAX_LNG)
    return point


def _validate_component(name: str, value: Any, lower: float, upper: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidCoordinate(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidCoordinate(f"{name} must be finite, got {value!r}")
    if value < lower or value > upper:
        raise InvalidCoordinate(f"{name} must be between {lower:g} and {upper:g}, got {value!r}")


@dataclass(frozen=True)
class Center:
    """A relief center as seen by the geo engine.

    Only the id, coordinate and ``active`` flag take part in queries;
    ``attributes`` (name, address, contact details, facility tags, ...) is
    carried through untouched.
    """

    center_id: str
    lat: float
    lng: float
    active: bool = True
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


@dataclass(frozen=True)
class DistancedCenter:
    center: Center
    distance: float

    @property
    def center_id(self) -> str:
        return self.center.center_id
