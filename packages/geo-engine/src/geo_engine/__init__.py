"""Geo engine core package."""

from geo_engine.bbox import BoundingBox, bounding_box
from geo_engine.distance import EARTH_RADIUS_KM, haversine_distance_km
from geo_engine.errors import (
    GeoEngineError,
    GeoValidationError,
    InvalidCoordinate,
    InvalidLimit,
    InvalidRadius,
    UpstreamFetchFailure,
)
from geo_engine.models import Center, DistancedCenter, GeoPoint, validate_point
from geo_engine.nearest import DEFAULT_NEAREST_LIMIT, nearest, validate_limit
from geo_engine.proximity import filter_by_radius, rank_by_distance, validate_radius

__all__ = [
    "BoundingBox",
    "Center",
    "DEFAULT_NEAREST_LIMIT",
    "DistancedCenter",
    "EARTH_RADIUS_KM",
    "GeoEngineError",
    "GeoPoint",
    "GeoValidationError",
    "InvalidCoordinate",
    "InvalidLimit",
    "InvalidRadius",
    "UpstreamFetchFailure",
    "bounding_box",
    "filter_by_radius",
    "haversine_distance_km",
    "nearest",
    "rank_by_distance",
    "validate_limit",
    "validate_point",
    "validate_radius",
]
