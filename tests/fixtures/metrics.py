"""Helpers for reading OpenTelemetry metrics in tests."""

from typing import Any

from opentelemetry.sdk.metrics.export import InMemoryMetricReader


def collect_metric_points(reader: InMemoryMetricReader) -> dict[str, list[Any]]:
    """Collect data points from a reader, keyed by metric name."""
    points: dict[str, list[Any]] = {}
    data = reader.get_metrics_data()
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points.setdefault(metric.name, []).extend(metric.data.data_points)
    return points


__all__ = ["collect_metric_points"]
