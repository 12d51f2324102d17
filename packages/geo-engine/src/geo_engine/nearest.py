from __future__ import annotations

from collections.abc import Iterable

from geo_engine.errors import InvalidLimit
from geo_engine.models import Center, DistancedCenter, GeoPoint
from geo_engine.proximity import rank_by_distance

DEFAULT_NEAREST_LIMIT = 5


def validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidLimit(f"limit must be an integer, got {limit!r}")
    if limit <= 0:
        raise InvalidLimit(f"limit must be > 0, got {limit}")
    return limit


def nearest(
    origin: GeoPoint,
    candidates: Iterable[Center],
    limit: int = DEFAULT_NEAREST_LIMIT,
) -> list[DistancedCenter]:
    limit = validate_limit(limit)
    return rank_by_distance(origin, candidates)[:limit]
