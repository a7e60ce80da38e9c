from prometheus_client import Counter, Histogram
from starlette_prometheus import metrics

# ==================================================
# Prometheus Metrics Definition
# ==================================================

# 1. Standard HTTP Metrics
# Counts total requests by method (GET/POST) and status code (200, 400, 500)
http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"]
)

# Latency distribution (p50, p95, p99)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

# 2. LLM Metrics
# Streams run for as long as the model keeps talking, hence the long buckets.
llm_stream_duration_seconds = Histogram(
    "llm_stream_duration_seconds",
    "Time spent streaming a reply to the client",
    ["provider"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0]
)

# How often the hosted provider failed and the chain moved on
llm_provider_fallbacks_total = Counter(
    "llm_provider_fallbacks_total",
    "Provider failures that triggered a fallback",
    ["provider"]
)


def setup_metrics(app):
    """
    Exposes the /metrics endpoint. Request metrics come from MetricsMiddleware.
    """
    app.add_route("/metrics", metrics)
