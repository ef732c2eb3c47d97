"""Prometheus metrics for outbound secret store calls."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

_REQUEST_COUNTER = Counter(
    "onboardbase_requests_total",
    "Total number of requests sent to the Onboardbase API",
    labelnames=("method", "path", "outcome"),
)
_REQUEST_LATENCY = Histogram(
    "onboardbase_request_latency_seconds",
    "Latency of Onboardbase API requests in seconds",
    labelnames=("method", "path"),
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        0.75,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)


def observe_request(method: str, path: str, outcome: str, duration: float) -> None:
    """Record one request. ``outcome`` is a status code or an error kind."""

    _REQUEST_COUNTER.labels(method=method, path=path, outcome=outcome).inc()
    _REQUEST_LATENCY.labels(method=method, path=path).observe(duration)


__all__ = ["observe_request"]
