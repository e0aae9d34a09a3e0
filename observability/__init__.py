"""Observability package for orgdocs."""

from .logging import setup_logging, configure_logging, JSONFormatter, ColoredFormatter
from .prometheus_metrics import (
    setup_prometheus_metrics,
    record_cache_lookup,
    record_source_fetch,
    record_search_metrics,
    PrometheusMiddleware,
    orgdocs_registry
)

__all__ = [
    'setup_logging',
    'configure_logging',
    'JSONFormatter',
    'ColoredFormatter',
    'setup_prometheus_metrics',
    'record_cache_lookup',
    'record_source_fetch',
    'record_search_metrics',
    'PrometheusMiddleware',
    'orgdocs_registry'
]
