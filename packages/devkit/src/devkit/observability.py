from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

_configured = False
_probe_filter_configured = False

PROBE_PATHS = ("/healthz", "/readyz")


def _strip_path(path: str) -> str:
    base = path.split("?", 1)[0]
    return base.rstrip("/") or "/"


def _access_path_and_status(record: logging.LogRecord) -> tuple[str | None, int | None]:
    # uvicorn.access args: (client, method, path, http_version, status)
    args: Any = record.args
    if not isinstance(args, tuple) or len(args) < 5:
        return None, None
    path = args[2] if isinstance(args[2], str) else None
    try:
        status = int(args[4])
    except (TypeError, ValueError):
        status = None
    return path, status


class ProbeAccessLogFilter(logging.Filter):
    def __init__(self, ignored_paths: tuple[str, ...] = PROBE_PATHS) -> None:
        super().__init__()
        self._ignored_paths = frozenset(_strip_path(path) for path in ignored_paths)

    def filter(self, record: logging.LogRecord) -> bool:
        path, status = _access_path_and_status(record)
        if path is None or status != 200:
            return True
        return _strip_path(path) not in self._ignored_paths


def configure_otel(service_name: str) -> None:
    global _configured
    if _configured:
        return
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    trace.set_tracer_provider(provider)
    _configured = True


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def configure_probe_access_log_filter(ignored_paths: tuple[str, ...] = PROBE_PATHS) -> None:
    global _probe_filter_configured
    if _probe_filter_configured:
        return
    logging.getLogger("uvicorn.access").addFilter(ProbeAccessLogFilter(ignored_paths=ignored_paths))
    _probe_filter_configured = True
