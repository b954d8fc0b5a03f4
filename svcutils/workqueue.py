"""Metrics for work queues, registered under the queue's name as subsystem."""

from __future__ import annotations

from typing import Optional

from svcutils.metrics import DEFAULT_REGISTRY, Counter, Gauge, Histogram, Registry


class PrometheusMetricsProvider:
    """Creates and registers the metrics a work queue reports."""

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self.registry = DEFAULT_REGISTRY if registry is None else registry

    def _register(self, metric):
        self.registry.register(metric)
        return metric

    def new_longest_running_processor_seconds_metric(self, name: str) -> Gauge:
        return self._register(
            Gauge(
                "longest_running_processor_s",
                "How many microseconds longest running processor from workqueue" + name + " takes.",
                subsystem=name,
            )
        )

    def new_unfinished_work_seconds_metric(self, name: str) -> Gauge:
        return self._register(
            Gauge(
                "unfinished_work_s",
                "How many seconds of work in progress in workqueue: " + name,
                subsystem=name,
            )
        )

    def new_longest_running_processor_microseconds_metric(self, name: str) -> Gauge:
        return self._register(
            Gauge(
                "longest_running_processor_us",
                "How many microseconds longest running processor from workqueue" + name + " takes.",
                subsystem=name,
            )
        )

    def new_depth_metric(self, name: str) -> Gauge:
        return self._register(
            Gauge("depth", "Current depth of workqueue: " + name, subsystem=name)
        )

    def new_adds_metric(self, name: str) -> Counter:
        return self._register(
            Counter("adds", "Total number of adds handled by workqueue: " + name, subsystem=name)
        )

    def new_latency_metric(self, name: str) -> Histogram:
        return self._register(
            Histogram(
                "queue_latency_us",
                "How long an item stays in workqueue" + name + " before being requested.",
                subsystem=name,
            )
        )

    def new_work_duration_metric(self, name: str) -> Histogram:
        return self._register(
            Histogram(
                "work_duration_us",
                "How long processing an item from workqueue" + name + " takes.",
                subsystem=name,
            )
        )

    def new_retries_metric(self, name: str) -> Counter:
        return self._register(
            Counter(
                "retries", "Total number of retries handled by workqueue: " + name, subsystem=name
            )
        )