from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests.",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds.",
    ["method", "path"],
)

portfolio_discard_total = Counter(
    "portfolio_discard_total",
    "Portfolio discard cascades by terminal state.",
    ["outcome"],
)

topology_requests_total = Counter(
    "topology_requests_total",
    "Topology service calls by operation and outcome.",
    ["operation", "outcome"],
)


def render_metrics() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
