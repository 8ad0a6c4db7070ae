from __future__ import annotations

from devkit.observability import configure_otel, configure_probe_access_log_filter
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from portal.dependencies import memory_metrics, portal_metrics, prometheus_metrics
from portal.errors import ApiError
from portal.middleware import ObservabilityMiddleware
from portal.response import error_response, success_response
from portal.routers.admin import router as admin_router
from portal.routers.appointments import router as appointments_router
from portal.routers.catalog import router as catalog_router
from portal.routers.dashboard import router as dashboard_router
from portal.routers.providers import router as providers_router


def create_app() -> FastAPI:
    app = FastAPI(title="Care Portal", version="0.1.0")
    configure_otel(service_name="care-portal")
    configure_probe_access_log_filter()
    app.state.portal_metrics = memory_metrics
    app.state.prom_metrics = prometheus_metrics
    app.add_middleware(ObservabilityMiddleware, collector=portal_metrics)
    app.include_router(providers_router)
    app.include_router(catalog_router)
    app.include_router(appointments_router)
    app.include_router(dashboard_router)
    app.include_router(admin_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"}, meta={})

    @app.get("/readyz")
    async def readyz() -> dict:
        return success_response({"status": "ready"}, meta={})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(
            status_code=422,
            content=error_response("VALIDATION_ERROR", message),
        )

    return app


app = create_app()
