from __future__ import annotations

from time import perf_counter
from uuid import uuid4

from devkit.observability import get_tracer
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from portal.observability import RequestMetric, RequestMetricCollector, set_trace_id

TRACE_HEADER = "x-trace-id"


def resource_name(path: str) -> str:
    """Map a request path to the portal area it addresses, e.g. /v1/catalog/products -> catalog."""
    parts = [part for part in path.split("/") if part]
    if not parts:
        return "root"
    if parts[0] == "v1":
        return parts[1] if len(parts) > 1 else "root"
    return parts[0]


class ObservabilityMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, collector: RequestMetricCollector) -> None:
        super().__init__(app)
        self._collector = collector
        self._tracer = get_tracer("care-portal")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or str(uuid4())
        set_trace_id(trace_id)
        started = perf_counter()
        with self._tracer.start_as_current_span("http.request") as span:
            span.set_attribute("http.method", request.method)
            span.set_attribute("http.route", request.url.path)
            span.set_attribute("portal.resource", resource_name(request.url.path))
            span.set_attribute("trace.id", trace_id)
            try:
                response = await call_next(request)
            except Exception:
                span.set_attribute("http.status_code", 500)
                self._record(request, 500, started, trace_id)
                raise
            span.set_attribute("http.status_code", response.status_code)

        response.headers[TRACE_HEADER] = trace_id
        self._record(request, response.status_code, started, trace_id)
        return response

    def _record(self, request: Request, status_code: int, started: float, trace_id: str) -> None:
        self._collector.observe(
            RequestMetric(
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=(perf_counter() - started) * 1000.0,
                trace_id=trace_id,
            )
        )
