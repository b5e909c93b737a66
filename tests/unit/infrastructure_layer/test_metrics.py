"""
Unit Tests for MetricsCollector

Tests that recording methods update the Prometheus registry.
"""

import pytest
from prometheus_client import REGISTRY

from biolink.infrastructure.monitoring.metrics_collector import get_metrics_collector


def sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.unit
class TestMetricsCollector:
    def test_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_record_cache_lookup(self, metrics):
        labels = {"tier": "memory", "namespace": "metrics-test", "outcome": "hit"}
        before = sample("biolink_cache_lookups_total", labels)

        metrics.record_cache_lookup("memory", "metrics-test", "hit")

        assert sample("biolink_cache_lookups_total", labels) == before + 1

    def test_record_fetch_counts_and_observes(self, metrics):
        labels = {"namespace": "metrics-test", "outcome": "found"}
        before = sample("biolink_persistence_fetches_total", labels)
        before_count = sample("biolink_persistence_fetch_seconds_count", {"namespace": "metrics-test"})

        metrics.record_fetch("metrics-test", "found", 0.01)

        assert sample("biolink_persistence_fetches_total", labels) == before + 1
        assert sample("biolink_persistence_fetch_seconds_count", {"namespace": "metrics-test"}) == before_count + 1

    def test_zero_evictions_not_recorded(self, metrics):
        labels = {"namespace": "metrics-test", "reason": "capacity"}
        before = sample("biolink_memory_cache_evictions_total", labels)

        metrics.record_memory_eviction("metrics-test", "capacity", 0)

        assert sample("biolink_memory_cache_evictions_total", labels) == before

    def test_record_error(self, metrics):
        labels = {"error_type": "RuntimeError", "stage": "metrics-test"}
        before = sample("biolink_errors_total", labels)

        metrics.record_error("RuntimeError", "metrics-test")

        assert sample("biolink_errors_total", labels) == before + 1

    def test_prometheus_output(self, metrics):
        metrics.record_tag_invalidation("profile")

        output = metrics.get_prometheus_metrics().decode("utf-8")

        assert "biolink_tag_invalidations_total" in output
        assert metrics.get_content_type().startswith("text/plain")
