class GeoEngineError(Exception):
    """Base geo engine exception."""

    code = "GEO_ENGINE_ERROR"


class GeoValidationError(GeoEngineError, ValueError):
    """Raised when a geospatial query input is invalid."""

    code = "VALIDATION_ERROR"


class InvalidCoordinate(GeoValidationError):
    """Raised when a latitude or longitude is non-finite or out of range."""

    code = "INVALID_COORDINATE"


class InvalidRadius(GeoValidationError):
    """Raised when a search radius is not a finite positive number."""

    code = "INVALID_RADIUS"


class InvalidLimit(GeoValidationError):
    """Raised when a result limit is not a positive integer."""

    code = "INVALID_LIMIT"


class UpstreamFetchFailure(GeoEngineError):
    """Raised when the candidate store failed to return a snapshot."""

    code = "UPSTREAM_FAILURE"
