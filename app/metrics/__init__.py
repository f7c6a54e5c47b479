"""
Prometheus metrics — single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "ponto_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "ponto_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "ponto_http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
RATE_LIMITED = Counter(
    "ponto_rate_limited_total", "Requests rejected by rate limiting"
)

# ── Business Metrics (updated by service layer only) ──
RANKINGS_COMPUTED = Counter(
    "ponto_rankings_computed_total", "Rankings computed", ["period"]
)
EXPORTS_GENERATED = Counter(
    "ponto_exports_generated_total", "Reports exported", ["format"]
)
OBSERVATIONS_ADDED = Counter(
    "ponto_observations_added_total", "Observations appended to members"
)
INTERVALS_MODIFIED = Counter(
    "ponto_intervals_modified_total", "Interval mutations", ["action"]
)
STORE_ERRORS = Counter(
    "ponto_store_errors_total", "Failed store operations", ["operation"]
)
DASHBOARD_LATENCY = Histogram(
    "ponto_dashboard_summary_seconds",
    "Time to build the dashboard summary (all sub-queries)",
    buckets=[0.05, 0.1, 0.25, 0.5, 1, 2.5, 5],
)
