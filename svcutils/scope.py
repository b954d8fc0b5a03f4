"""Nestable metric name prefixes and stopwatches that time code into summaries."""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping, Optional, Union

from svcutils.metrics import (
    DEFAULT_BUCKETS,
    DEFAULT_OBJECTIVES,
    DEFAULT_REGISTRY,
    Counter,
    CounterVec,
    Gauge,
    GaugeVec,
    Histogram,
    HistogramVec,
    Registry,
    Summary,
    SummaryVec,
)

_SCOPE_DELIMITER = ":"
_METRIC_DELIMITER = "_"

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN

Duration = Union[timedelta, int]


def _to_nanoseconds(duration: Duration) -> int:
    """Convert a timedelta, or an integer number of nanoseconds, to nanoseconds."""
    if isinstance(duration, timedelta):
        return (duration // timedelta(microseconds=1)) * _NS_PER_US
    return int(duration)


def duration_to_string(duration: Duration) -> str:
    """Return the unit suffix that matches the scale of a duration."""
    ns = _to_nanoseconds(duration)
    if ns >= _NS_PER_HOUR:
        return "h"
    if ns >= _NS_PER_MIN:
        return "m"
    if ns >= _NS_PER_S:
        return "s"
    if ns >= _NS_PER_MS:
        return "ms"
    if ns >= _NS_PER_US:
        return "us"
    return "ns"


def _scaled(elapsed_ns: int, scale_ns: int) -> float:
    if scale_ns == 0:
        return 0.0
    return float(elapsed_ns // scale_ns)


@dataclass
class SummaryOptions:
    """Options for a summary metric: quantile objectives and their allowed errors."""

    objectives: Mapping[float, float] = field(default_factory=lambda: dict(DEFAULT_OBJECTIVES))


class Timer:
    """A running timer that records the elapsed time when stopped."""

    def __init__(self, observer: Any, output_scale: Duration) -> None:
        self.start = time.monotonic_ns()
        self.output_scale = output_scale
        self._observer = observer

    def stop(self) -> float:
        """Record and return the elapsed time in units of the output scale."""
        value = _scaled(time.monotonic_ns() - self.start, _to_nanoseconds(self.output_scale))
        self._observer.observe(value)
        return value

    def __enter__(self) -> Timer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


class StopWatch:
    """Records durations into a summary, scaled to a unit such as milliseconds."""

    def __init__(self, observer: Any, output_scale: Duration) -> None:
        self.observer = observer
        self.output_scale = output_scale

    def start(self) -> Timer:
        """Start a timer; stop it (or leave its ``with`` block) to record."""
        return Timer(self.observer, self.output_scale)

    def observe(self, start: datetime, end: datetime) -> None:
        """Record the duration between two points in time."""
        elapsed = _to_nanoseconds(end - start)
        self.observer.observe(_scaled(elapsed, _to_nanoseconds(self.output_scale)))

    def time(self, func: Callable[[], Any]) -> Any:
        """Call ``func``, record how long it took, and return its result."""
        timer = self.start()
        try:
            return func()
        finally:
            timer.stop()


class StopWatchVec:
    """Stopwatches partitioned by label values."""

    def __init__(self, summary_vec: SummaryVec, output_scale: Duration) -> None:
        self.summary_vec = summary_vec
        self.output_scale = output_scale

    def with_label_values(self, *values: str) -> StopWatch:
        """Return the stopwatch for label values given in label-name order."""
        return StopWatch(self.summary_vec.with_label_values(*values), self.output_scale)

    def get_metric_with(self, labels: Mapping[str, str]) -> StopWatch:
        """Return the stopwatch for a mapping of label names to values."""
        return StopWatch(self.summary_vec.get_metric_with(labels), self.output_scale)


class Scope:
    """A metric name prefix; metrics created through it are named and registered under it."""

    def __init__(self, scope: str, registry: Registry) -> None:
        self._scope = scope
        self.registry = registry

    def _register(self, metric):
        self.registry.register(metric)
        return metric

    def new_gauge(self, name: str, description: str) -> Gauge:
        return self._register(Gauge(self.new_scoped_metric_name(name), description))

    def new_gauge_vec(self, name: str, description: str, *label_names: str) -> GaugeVec:
        return self._register(GaugeVec(self.new_scoped_metric_name(name), description, label_names))

    def new_summary(self, name: str, description: str) -> Summary:
        return self.new_summary_with_options(name, description, SummaryOptions())

    def new_summary_with_options(self, name: str, description: str, options: SummaryOptions) -> Summary:
        return self._register(
            Summary(self.new_scoped_metric_name(name), description, objectives=options.objectives)
        )

    def new_summary_vec(self, name: str, description: str, *label_names: str) -> SummaryVec:
        return self._register(
            SummaryVec(
                self.new_scoped_metric_name(name),
                description,
                label_names,
                objectives=DEFAULT_OBJECTIVES,
            )
        )

    def new_histogram(self, name: str, description: str) -> Histogram:
        return self._register(
            Histogram(self.new_scoped_metric_name(name), description, buckets=DEFAULT_BUCKETS)
        )

    def new_histogram_vec(self, name: str, description: str, *label_names: str) -> HistogramVec:
        return self._register(
            HistogramVec(
                self.new_scoped_metric_name(name), description, label_names, buckets=DEFAULT_BUCKETS
            )
        )

    def new_counter(self, name: str, description: str) -> Counter:
        return self._register(Counter(self.new_scoped_metric_name(name), description))

    def new_counter_vec(self, name: str, description: str, *label_names: str) -> CounterVec:
        return self._register(CounterVec(self.new_scoped_metric_name(name), description, label_names))

    @staticmethod
    def _stop_watch_name(name: str, scale: Duration) -> str:
        if not name.endswith(_METRIC_DELIMITER):
            name += _METRIC_DELIMITER
        return name + duration_to_string(scale)

    def new_stop_watch(self, name: str, description: str, scale: Duration) -> StopWatch:
        """Create a stopwatch whose metric name is suffixed with the scale's unit."""
        summary = self.new_summary(self._stop_watch_name(name, scale), description)
        return StopWatch(summary, scale)

    def new_stop_watch_vec(
        self, name: str, description: str, scale: Duration, *label_names: str
    ) -> StopWatchVec:
        """Create a labelled stopwatch whose metric name is suffixed with the scale's unit."""
        vec = self.new_summary_vec(self._stop_watch_name(name, scale), description, *label_names)
        return StopWatchVec(vec, scale)

    def new_sub_scope(self, name: str) -> Scope:
        """Return a nested scope sharing this scope's registry."""
        if not name:
            raise ValueError("scope name cannot be an empty string")
        if not name.endswith(_SCOPE_DELIMITER):
            name += _SCOPE_DELIMITER
        return new_scope(self._scope + name, self.registry)

    def current_scope(self) -> str:
        return self._scope

    def new_scoped_metric_name(self, name: str) -> str:
        """Return ``name`` prefixed with this scope."""
        if not name:
            raise ValueError("metric name cannot be an empty string")
        return self._scope + name

    def __repr__(self) -> str:
        return f"Scope({self._scope!r})"


def new_scope(name: str, registry: Optional[Registry] = None) -> Scope:
    """Create a scope, appending the scope delimiter if it is missing."""
    if not name:
        raise ValueError("base scope for a metric cannot be an empty string")
    if not name.endswith(_SCOPE_DELIMITER):
        name += _SCOPE_DELIMITER
    return Scope(name, DEFAULT_REGISTRY if registry is None else registry)


def new_test_scope(registry: Optional[Registry] = None) -> Scope:
    """Return a randomly named scope, for tests."""
    suffix = "".join(random.choices(string.ascii_lowercase, k=6))
    return new_scope("test" + suffix, registry)