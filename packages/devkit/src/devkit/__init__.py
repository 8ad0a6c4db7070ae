"""Common runtime devkit for portal infrastructure concerns."""

from devkit.config import ServiceSettings, load_settings
from devkit.observability import (
    ProbeAccessLogFilter,
    configure_otel,
    configure_probe_access_log_filter,
    get_tracer,
)
from devkit.timezone import now_in, resolve_zone, today_in

__all__ = [
    "ProbeAccessLogFilter",
    "ServiceSettings",
    "configure_otel",
    "configure_probe_access_log_filter",
    "get_tracer",
    "load_settings",
    "now_in",
    "resolve_zone",
    "today_in",
]
