"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behaviour import the one they need and increment it at the point of
action.  HTTP metrics are fed by MetricsMiddleware, domain metrics by the
service layer.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP
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
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Marketplace
# ---------------------------------------------------------------------------

COURSE_PURCHASES = Counter(
    "course_purchases_total",
    "Purchase attempts by result",
    ["result"],  # "created" or "duplicate"
)

LESSON_COMPLETIONS = Counter(
    "lesson_completions_total",
    "Lesson completion events by upsert outcome",
    ["outcome"],  # "created" or "updated"
)

CATALOG_RESEEDS = Counter(
    "catalog_reseeds_total",
    "Number of destructive sample-catalog reseeds",
)

CHANGE_FEED_SUBSCRIBERS = Gauge(
    "change_feed_subscribers",
    "Clients currently subscribed to the change stream",
)
