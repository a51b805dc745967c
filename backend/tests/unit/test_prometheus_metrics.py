"""Tests for the cached Prometheus exposition."""

from unittest.mock import patch

import pytest

from tutorly.monitoring import prometheus_metrics as metrics_module
from tutorly.monitoring.prometheus_metrics import PrometheusMetrics, prometheus_metrics


@pytest.fixture(autouse=True)
def fresh_cache():
    prometheus_metrics._invalidate_cache()
    yield
    prometheus_metrics._invalidate_cache()


def test_recording_keeps_cached_payload_within_ttl():
    with patch.object(metrics_module, "monotonic", return_value=1000.0):
        first = prometheus_metrics.get_metrics()
        prometheus_metrics.record_service_operation("CacheTestService", "cached_op", 0.01)
        second = prometheus_metrics.get_metrics()

    assert second is first
    assert PrometheusMetrics._cache_payload is first
    assert b'operation="cached_op"' not in second


def test_payload_rebuilt_after_ttl():
    with patch.object(metrics_module, "monotonic", return_value=1000.0):
        prometheus_metrics.get_metrics()
        prometheus_metrics.record_service_operation("CacheTestService", "late_op", 0.01)

    later = 1000.0 + PrometheusMetrics._cache_ttl_seconds + 0.5
    with patch.object(metrics_module, "monotonic", return_value=later):
        payload = prometheus_metrics.get_metrics()

    assert b'operation="late_op"' in payload


def test_invalidate_forces_rebuild():
    with patch.object(metrics_module, "monotonic", return_value=1000.0):
        prometheus_metrics.get_metrics()
        prometheus_metrics.inc_availability_conflict("weekly", source="storage")
        prometheus_metrics._invalidate_cache()
        payload = prometheus_metrics.get_metrics()

    assert b'tutorly_availability_conflicts_total{scope="weekly",source="storage"}' in payload
