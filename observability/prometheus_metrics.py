"""Prometheus metrics integration for orgdocs."""

from prometheus_client import Counter, Histogram, Info, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.core import CollectorRegistry
from fastapi import FastAPI, Request, Response
import re
import time
import logging
import os

logger = logging.getLogger(__name__)

# Create custom registry for orgdocs metrics
orgdocs_registry = CollectorRegistry()

# Request metrics
request_count = Counter(
    'orgdocs_http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=orgdocs_registry
)

request_duration = Histogram(
    'orgdocs_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=orgdocs_registry
)

# Cache metrics
cache_lookups = Counter(
    'orgdocs_cache_lookups_total',
    'Document cache lookups',
    ['result'],
    registry=orgdocs_registry
)

# Source metrics
source_fetches = Counter(
    'orgdocs_source_fetches_total',
    'Origin fetches performed by source adapters',
    ['source_type', 'status'],
    registry=orgdocs_registry
)

source_fetch_duration = Histogram(
    'orgdocs_source_fetch_duration_seconds',
    'Origin fetch duration in seconds',
    ['source_type'],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=orgdocs_registry
)

# Search metrics
search_requests = Counter(
    'orgdocs_search_requests_total',
    'Total number of search requests',
    ['status'],
    registry=orgdocs_registry
)

search_duration = Histogram(
    'orgdocs_search_duration_seconds',
    'Search request duration in seconds',
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=orgdocs_registry
)

search_results_count = Histogram(
    'orgdocs_search_results_count',
    'Number of search results returned',
    buckets=[0, 1, 2, 5, 10, 20],
    registry=orgdocs_registry
)

search_skipped_documents = Counter(
    'orgdocs_search_skipped_documents_total',
    'Documents dropped from a search because their fetch failed',
    registry=orgdocs_registry
)

# Application info
app_info = Info(
    'orgdocs_app_info',
    'orgdocs application information',
    registry=orgdocs_registry
)


class PrometheusMiddleware:
    """Middleware to collect Prometheus metrics for HTTP requests."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        method = request.method
        endpoint = self._normalize_endpoint(request.url.path)

        start_time = time.time()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            request_count.labels(
                method=method,
                endpoint=endpoint,
                status_code=str(status_code)
            ).inc()

            request_duration.labels(
                method=method,
                endpoint=endpoint
            ).observe(time.time() - start_time)

    def _normalize_endpoint(self, path: str) -> str:
        """Collapse per-topic paths to keep label cardinality bounded."""
        return re.sub(r'^/documents/[^/]+', '/documents/{topic}', path)


def setup_prometheus_metrics(app: FastAPI) -> None:
    """Setup Prometheus metrics collection for FastAPI app."""
    app.add_middleware(PrometheusMiddleware)

    @app.get("/metrics")
    async def metrics_endpoint():
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(orgdocs_registry), media_type=CONTENT_TYPE_LATEST)

    app_info.info({
        'version': os.getenv('APP_VERSION', 'unknown'),
        'environment': os.getenv('ENVIRONMENT', 'development')
    })

    logger.info("Prometheus metrics configured")


def record_cache_lookup(hit: bool) -> None:
    cache_lookups.labels(result="hit" if hit else "miss").inc()


def record_source_fetch(source_type: str, duration: float, error: bool = False) -> None:
    """Record one origin fetch made by an adapter."""
    source_fetches.labels(source_type=source_type, status="error" if error else "success").inc()
    if not error:
        source_fetch_duration.labels(source_type=source_type).observe(duration)


def record_search_metrics(duration: float, result_count: int, skipped: int = 0,
                          error: bool = False) -> None:
    """Record search-related metrics."""
    search_requests.labels(status="error" if error else "success").inc()
    search_duration.observe(duration)

    if not error:
        search_results_count.observe(result_count)

    if skipped:
        search_skipped_documents.inc(skipped)
