from __future__ import annotations

import asyncio
import logging
from typing import Any

from devkit.config import ServiceSettings
from devkit.observability import get_trace_id, get_tracer
from geo_engine.bbox import bounding_box
from geo_engine.errors import InvalidCoordinate, UpstreamFetchFailure
from geo_engine.models import Center, DistancedCenter, GeoPoint, validate_point
from geo_engine.nearest import nearest, validate_limit
from geo_engine.proximity import filter_by_radius, validate_radius

from center_service.schemas import CenterCreateRequest, CenterItem, CenterUpdateRequest, DistancedCenterItem
from center_service.store import CenterStore, ReliefCenter

logger = logging.getLogger(__name__)


class CenterNotFound(LookupError):
    """Raised when a relief center id is unknown."""


def resolve_origin(lat: float | None, lng: float | None, *, required: bool) -> GeoPoint | None:
    if lat is None and lng is None:
        if required:
            raise InvalidCoordinate("lat and lng are required")
        return None
    if lat is None or lng is None:
        raise InvalidCoordinate("lat and lng must be provided together")
    return validate_point(GeoPoint(lat=lat, lng=lng))


def to_item(center: Center) -> CenterItem:
    return CenterItem(
        id=center.center_id,
        lat=center.lat,
        lng=center.lng,
        is_active=center.active,
        **center.attributes,
    )


def to_distanced_item(item: DistancedCenter) -> DistancedCenterItem:
    center = item.center
    return DistancedCenterItem(
        id=center.center_id,
        lat=center.lat,
        lng=center.lng,
        is_active=center.active,
        distance=item.distance,
        **center.attributes,
    )


class CenterQueryService:
    def __init__(self, store: CenterStore, settings: ServiceSettings) -> None:
        self._store = store
        self._settings = settings
        self._tracer = get_tracer("center-service")

    async def list_centers(
        self,
        lat: float | None,
        lng: float | None,
        radius_km: float | None = None,
        limit: int | None = None,
    ) -> list[CenterItem] | list[DistancedCenterItem]:
        """List active centers, filtered to ``radius_km`` around (lat, lng) when given.

        Without an origin the newest ``limit`` active centers are returned and
        no distance is computed.
        """
        origin = resolve_origin(lat, lng, required=False)
        limit = validate_limit(self._settings.CENTER_DEFAULT_LIST_LIMIT if limit is None else limit)
        if origin is None:
            candidates = await self._fetch_snapshot(limit=limit, newest_first=True)
            self._log_query("list", candidates=len(candidates), results=len(candidates))
            return [to_item(center) for center in candidates]

        radius_km = validate_radius(self._settings.CENTER_DEFAULT_RADIUS_KM if radius_km is None else radius_km)
        candidates = await self._fetch_snapshot(bbox=bounding_box(origin, radius_km))
        with self._tracer.start_as_current_span("centers.within_radius") as span:
            span.set_attribute("centers.candidate_count", len(candidates))
            span.set_attribute("centers.radius_km", radius_km)
            matched = filter_by_radius(origin, radius_km, candidates)[:limit]
            span.set_attribute("centers.result_count", len(matched))
        self._log_query("within_radius", candidates=len(candidates), results=len(matched))
        return [to_distanced_item(item) for item in matched]

    async def list_nearest(
        self,
        lat: float | None,
        lng: float | None,
        limit: int | None = None,
    ) -> list[DistancedCenterItem]:
        origin = resolve_origin(lat, lng, required=True)
        limit = validate_limit(self._settings.CENTER_DEFAULT_NEAREST_LIMIT if limit is None else limit)
        candidates = await self._fetch_snapshot()
        with self._tracer.start_as_current_span("centers.nearest") as span:
            span.set_attribute("centers.candidate_count", len(candidates))
            selected = nearest(origin, candidates, limit=limit)
            span.set_attribute("centers.result_count", len(selected))
        self._log_query("nearest", candidates=len(candidates), results=len(selected))
        return [to_distanced_item(item) for item in selected]

    async def get_center(self, center_id: str) -> CenterItem:
        center = await self._store.get_by_id(center_id)
        if center is None:
            raise CenterNotFound(center_id)
        return to_item(center.to_candidate())

    async def create_center(self, body: CenterCreateRequest) -> CenterItem:
        validate_point(GeoPoint(lat=body.lat, lng=body.lng))
        saved = await self._store.create(ReliefCenter(**body.model_dump()))
        return to_item(saved.to_candidate())

    async def update_center(self, center_id: str, body: CenterUpdateRequest) -> CenterItem:
        changes: dict[str, Any] = body.model_dump(exclude_unset=True)
        current = await self._store.get_by_id(center_id)
        if current is None:
            raise CenterNotFound(center_id)
        validate_point(GeoPoint(lat=changes.get("lat", current.lat), lng=changes.get("lng", current.lng)))
        updated = await self._store.update(center_id, changes)
        if updated is None:
            raise CenterNotFound(center_id)
        return to_item(updated.to_candidate())

    async def delete_center(self, center_id: str) -> None:
        if not await self._store.delete(center_id):
            raise CenterNotFound(center_id)

    async def _fetch_snapshot(self, **kwargs: Any) -> list[Center]:
        timeout = self._settings.CENTER_STORE_TIMEOUT_SECONDS
        try:
            return await asyncio.wait_for(self._store.list_active(**kwargs), timeout=timeout)
        except Exception as exc:
            logger.exception(
                "center_store_fetch_failed",
                extra={
                    "component": "center_service",
                    "error": type(exc).__name__,
                    "trace_id": get_trace_id(),
                },
            )
            raise UpstreamFetchFailure("failed to fetch relief centers") from exc

    def _log_query(self, query: str, *, candidates: int, results: int) -> None:
        logger.info(
            "center_query_completed",
            extra={
                "component": "center_service",
                "query": query,
                "candidate_count": candidates,
                "result_count": results,
                "trace_id": get_trace_id(),
            },
        )
