from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from devkit.config import ServiceSettings, load_settings
from devkit.observability import (
    CompositeMetricsCollector,
    InMemoryMetricsCollector,
    PrometheusMetricsCollector,
    configure_otel,
    configure_probe_access_log_filter,
)
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from geo_engine.errors import GeoEngineError

from center_service.errors import ApiError, from_geo_error
from center_service.middleware import ObservabilityMiddleware
from center_service.response import error_response, list_response, success_response
from center_service.schemas import FACILITY_TAGS, CenterCreateRequest, CenterUpdateRequest, UserLocation
from center_service.service import CenterNotFound, CenterQueryService
from center_service.store import CenterStore


def create_app(
    store: CenterStore | None = None,
    settings: ServiceSettings | None = None,
) -> FastAPI:
    settings = settings or load_settings("center-service")
    if store is None:
        store = CenterStore(database_url=settings.DATABASE_URL)
    service = CenterQueryService(store, settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await store.close()

    app = FastAPI(title="Relief Center Service", version="0.1.0", lifespan=lifespan)
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()
    app.state.api_metrics = InMemoryMetricsCollector()
    app.state.prom_metrics = PrometheusMetricsCollector(prefix="center_service")
    app.state.composite_metrics = CompositeMetricsCollector(
        [app.state.api_metrics, app.state.prom_metrics]
    )
    app.add_middleware(ObservabilityMiddleware, collector=app.state.composite_metrics)

    @app.get("/healthz")
    async def healthz() -> dict[str, object]:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict[str, object]:
        return success_response({"status": "ready"}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.get("/v1/centers")
    async def list_centers(
        lat: float | None = None,
        lng: float | None = None,
        radius: float | None = Query(default=None, description="Search radius in kilometers"),
        limit: int | None = None,
    ) -> dict[str, object]:
        items = await service.list_centers(lat, lng, radius_km=radius, limit=limit)
        return list_response(items)

    @app.get("/v1/centers/nearest")
    async def list_nearest(
        lat: float | None = None,
        lng: float | None = None,
        limit: int | None = None,
    ) -> dict[str, object]:
        items = await service.list_nearest(lat, lng, limit=limit)
        return list_response(items, user_location=UserLocation(lat=lat, lng=lng).model_dump())

    @app.get("/v1/centers/facility-tags")
    async def facility_tags() -> dict[str, object]:
        return success_response(list(FACILITY_TAGS), meta={"count": len(FACILITY_TAGS)})

    @app.get("/v1/centers/{center_id}")
    async def get_center(center_id: str) -> dict[str, object]:
        item = await service.get_center(center_id)
        return success_response(item.model_dump(), meta={})

    @app.post("/v1/centers", status_code=201)
    async def create_center(body: CenterCreateRequest) -> dict[str, object]:
        item = await service.create_center(body)
        return success_response(item.model_dump(), meta={})

    @app.put("/v1/centers/{center_id}")
    async def update_center(center_id: str, body: CenterUpdateRequest) -> dict[str, object]:
        item = await service.update_center(center_id, body)
        return success_response(item.model_dump(), meta={})

    @app.delete("/v1/centers/{center_id}")
    async def delete_center(center_id: str) -> dict[str, object]:
        await service.delete_center(center_id)
        return success_response({"id": center_id}, meta={})

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))

    @app.exception_handler(GeoEngineError)
    async def handle_geo_error(request: Request, exc: GeoEngineError) -> JSONResponse:
        return await handle_api_error(request, from_geo_error(exc))

    @app.exception_handler(CenterNotFound)
    async def handle_not_found(_: Request, __: CenterNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content=error_response("NOT_FOUND", "relief center not found"))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=400,
            content=error_response("VALIDATION_ERROR", message),
        )

    return app


app = create_app()
