from __future__ import annotations

from collections import Counter as TallyCounter
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")

GEOCODE_OUTCOMES = ("resolved", "no_result", "failed", "skipped", "stale")


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


@dataclass(frozen=True)
class RequestMetric:
    method: str
    path: str
    status_code: int
    duration_ms: float
    trace_id: str


class RequestMetricCollector(Protocol):
    def observe(self, metric: RequestMetric) -> None: ...


class LocatorMetricCollector(Protocol):
    def observe_geocode(self, outcome: str) -> None: ...

    def observe_pass(self, marker_count: int) -> None: ...


class InMemoryPortalMetrics:
    def __init__(self) -> None:
        self._requests: list[RequestMetric] = []
        self.geocode_outcomes: TallyCounter[str] = TallyCounter()
        self.pass_marker_counts: list[int] = []

    def observe(self, metric: RequestMetric) -> None:
        self._requests.append(metric)

    def observe_geocode(self, outcome: str) -> None:
        self.geocode_outcomes[outcome] += 1

    def observe_pass(self, marker_count: int) -> None:
        self.pass_marker_counts.append(marker_count)

    def snapshot(self) -> list[dict]:
        return [asdict(item) for item in self._requests]


class PrometheusPortalMetrics:
    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "portal_http_requests_total",
            "Total portal HTTP requests",
            labelnames=("method", "path", "status_code"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "portal_http_request_duration_ms",
            "Portal HTTP request latency in milliseconds",
            labelnames=("method", "path"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000),
            registry=self._registry,
        )
        self._geocode_counter = Counter(
            "portal_geocode_lookups_total",
            "Geocode lookups grouped by outcome",
            labelnames=("outcome",),
            registry=self._registry,
        )
        self._markers_histogram = Histogram(
            "portal_locator_pass_markers",
            "Markers placed per locate pass",
            buckets=(0, 1, 2, 3, 4, 5, 6, 10, 25),
            registry=self._registry,
        )
        for outcome in GEOCODE_OUTCOMES:
            self._geocode_counter.labels(outcome)

    def observe(self, metric: RequestMetric) -> None:
        self._request_counter.labels(metric.method, metric.path, str(metric.status_code)).inc()
        self._latency_histogram.labels(metric.method, metric.path).observe(metric.duration_ms)

    def observe_geocode(self, outcome: str) -> None:
        self._geocode_counter.labels(outcome).inc()

    def observe_pass(self, marker_count: int) -> None:
        self._markers_histogram.observe(marker_count)

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


class CompositePortalMetrics:
    def __init__(self, collectors: list[InMemoryPortalMetrics | PrometheusPortalMetrics]) -> None:
        self._collectors = collectors

    def observe(self, metric: RequestMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)

    def observe_geocode(self, outcome: str) -> None:
        for collector in self._collectors:
            collector.observe_geocode(outcome)

    def observe_pass(self, marker_count: int) -> None:
        for collector in self._collectors:
            collector.observe_pass(marker_count)
