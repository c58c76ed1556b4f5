"""Prometheus metrics inventory.

Every metric the service exposes is declared here; the modules that own
the behavior import and update them at the point of action.

HTTP metrics are fed by MetricsMiddleware.  The cascade metrics answer
the operational questions specific to this service: how often deletions
fail part-way, and how often storage cleanup leaves an object behind.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    # Course deletions make O(videos) sequential round trips, so the upper
    # buckets are wider than a typical CRUD API needs.
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Application-specific metrics
# ---------------------------------------------------------------------------

CASCADE_DELETIONS = Counter(
    "cascade_deletions_total",
    "Cascade deletions by resource type and outcome",
    ["resource", "outcome"],  # resource: video|course, outcome: ok|failed
)

STORAGE_REMOVALS = Counter(
    "storage_removals_total",
    "Object storage removals by bucket and result",
    ["bucket", "result"],  # removed|absent|failed
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
