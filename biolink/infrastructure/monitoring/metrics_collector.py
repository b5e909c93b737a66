#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

This module provides metrics collection for the read path:
- Cache lookups by tier, namespace and outcome
- Persistence fetches by resource and outcome
- Tag invalidations and background revalidations
- Memory cache size and evictions

Architectural Decision: prometheus-client for industry-standard metrics
- Compatible with Grafana dashboards
- Histogram buckets for fetch latency percentiles

Author: Senior Solution Architect
Date: 2025-12-05
"""


from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    Info,
    generate_latest,
)

from biolink.core.config.settings import get_settings
from biolink.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Metric Definitions
# ============================================================================

# Cache metrics
CACHE_LOOKUPS = Counter(
    'biolink_cache_lookups_total',
    'Cache lookups by tier and outcome',
    ['tier', 'namespace', 'outcome']  # outcome: hit, stale, miss, invalidated
)

MEMORY_CACHE_KEYS = Gauge(
    'biolink_memory_cache_keys',
    'Entries currently held by the process memory cache',
    ['namespace']
)

MEMORY_CACHE_EVICTIONS = Counter(
    'biolink_memory_cache_evictions_total',
    'Entries removed from the process memory cache',
    ['namespace', 'reason']  # capacity, expired
)

# Revalidation metrics
TAG_INVALIDATIONS = Counter(
    'biolink_tag_invalidations_total',
    'Revalidation tag invalidations',
    ['tag']
)

BACKGROUND_REVALIDATIONS = Counter(
    'biolink_background_revalidations_total',
    'Background refreshes of stale entries',
    ['namespace', 'outcome']  # success, absent, failure
)

# Persistence metrics
PERSISTENCE_FETCHES = Counter(
    'biolink_persistence_fetches_total',
    'Persistence accessor calls made by the read path',
    ['namespace', 'outcome']  # found, absent, error
)

PERSISTENCE_FETCH_LATENCY = Histogram(
    'biolink_persistence_fetch_seconds',
    'Persistence accessor latency',
    ['namespace'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)
)

# Error metrics
ERRORS = Counter(
    'biolink_errors_total',
    'Errors by type and stage',
    ['error_type', 'stage']
)

# App info
APP_INFO = Info(
    'biolink_app',
    'Application information'
)


class MetricsCollector:
    """
    Centralized metrics collector.

    STAGE-M: Metrics collection

    Usage:
        metrics = get_metrics_collector()
        metrics.record_cache_lookup("memory", "profile", "hit")
        output = metrics.get_prometheus_metrics()
    """

    def __init__(self):
        """Initialize metrics collector."""
        self.settings = get_settings()

        APP_INFO.info({
            'version': self.settings.app.APP_VERSION,
            'environment': self.settings.app.ENVIRONMENT,
            'app_name': self.settings.app.APP_NAME
        })

        logger.info("Metrics collector initialized", stage="M.0")

    # =========================================================================
    # Cache Metrics
    # =========================================================================

    def record_cache_lookup(self, tier: str, namespace: str, outcome: str) -> None:
        CACHE_LOOKUPS.labels(tier=tier, namespace=namespace, outcome=outcome).inc()

    def set_memory_cache_keys(self, namespace: str, count: int) -> None:
        MEMORY_CACHE_KEYS.labels(namespace=namespace).set(count)

    def record_memory_eviction(self, namespace: str, reason: str, count: int = 1) -> None:
        if count:
            MEMORY_CACHE_EVICTIONS.labels(namespace=namespace, reason=reason).inc(count)

    # =========================================================================
    # Revalidation Metrics
    # =========================================================================

    def record_tag_invalidation(self, tag: str) -> None:
        TAG_INVALIDATIONS.labels(tag=tag).inc()

    def record_background_revalidation(self, namespace: str, outcome: str) -> None:
        BACKGROUND_REVALIDATIONS.labels(namespace=namespace, outcome=outcome).inc()

    # =========================================================================
    # Persistence Metrics
    # =========================================================================

    def record_fetch(self, namespace: str, outcome: str, duration_seconds: float) -> None:
        """Record one accessor call and its latency."""
        PERSISTENCE_FETCHES.labels(namespace=namespace, outcome=outcome).inc()
        PERSISTENCE_FETCH_LATENCY.labels(namespace=namespace).observe(duration_seconds)

    # =========================================================================
    # Error Metrics
    # =========================================================================

    def record_error(self, error_type: str, stage: str) -> None:
        ERRORS.labels(error_type=error_type, stage=stage).inc()

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        return generate_latest(REGISTRY)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST


# Global metrics collector
_metrics: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Get global metrics collector."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
