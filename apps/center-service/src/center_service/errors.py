from __future__ import annotations

from dataclasses import dataclass

from geo_engine.errors import GeoEngineError, GeoValidationError, UpstreamFetchFailure


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int


def from_geo_error(exc: GeoEngineError) -> ApiError:
    if isinstance(exc, GeoValidationError):
        return ApiError(exc.code, str(exc), 400)
    if isinstance(exc, UpstreamFetchFailure):
        return ApiError(exc.code, "Relief center store is unavailable", 502)
    return ApiError("INTERNAL_ERROR", "Geo query failed", 500)
