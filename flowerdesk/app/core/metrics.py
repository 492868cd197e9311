"""
Prometheus metrics: HTTP traffic plus shop-level counters.
"""
import time

from fastapi import Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.openmetrics.exposition import generate_latest as generate_latest_openmetrics
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request


# Request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Business metrics
orders_created_total = Counter(
    'orders_created_total',
    'Total number of orders created',
    ['kind']
)

order_status_changes_total = Counter(
    'order_status_changes_total',
    'Order status changes by target status',
    ['status']
)

bouquet_actions_total = Counter(
    'bouquet_actions_total',
    'Bouquet lifecycle events',
    ['action']
)

writeoff_units_total = Counter(
    'writeoff_units_total',
    'Number of flower stems written off'
)


def _route_template(request: Request) -> str:
    """Use the matched route template (``/api/orders/{order_id}``) to keep label cardinality low."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            duration = time.perf_counter() - start_time
            endpoint = _route_template(request)
            http_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)

        return response


def get_metrics_response(openmetrics: bool = False) -> Response:
    """Render the default registry in Prometheus or OpenMetrics text format."""
    if openmetrics:
        content = generate_latest_openmetrics()
        content_type = "application/openmetrics-text; version=1.0.0; charset=utf-8"
    else:
        content = generate_latest()
        content_type = CONTENT_TYPE_LATEST

    return Response(content=content, media_type=content_type)
