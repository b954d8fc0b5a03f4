"""A small in-process metrics registry with counters, gauges, summaries and histograms."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Sequence

DEFAULT_OBJECTIVES: dict[float, float] = {0.5: 0.05, 0.9: 0.01, 0.99: 0.001}
DEFAULT_BUCKETS: tuple[float, ...] = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10)

_Sample = tuple[str, dict[str, str], float]


class DuplicateMetricError(ValueError):
    """Raised when a metric with an already registered name is registered."""


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if float(value).is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


def _full_name(namespace: str, subsystem: str, name: str) -> str:
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class Desc:
    """The description of a metric: its full name, help text and label names."""

    fq_name: str
    help: str
    variable_labels: tuple[str, ...] = ()
    const_labels: Mapping[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        const = ",".join(f"{k}={v!r}" for k, v in sorted(self.const_labels.items()))
        variable = " ".join(self.variable_labels)
        return (
            f'Desc{{fqName: "{self.fq_name}", help: "{self.help}", '
            f"constLabels: {{{const}}}, variableLabels: [{variable}]}}"
        )


class _Metric:
    type_name = "untyped"

    def __init__(self, name: str, help: str = "", *, subsystem: str = "", namespace: str = "") -> None:
        if not name:
            raise ValueError("metric name cannot be empty")
        self.desc = Desc(_full_name(namespace, subsystem, name), help)
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.desc.fq_name

    def _values(self) -> Iterator[tuple[str, dict[str, str], float]]:
        raise NotImplementedError

    def samples(self) -> list[_Sample]:
        """Return the metric's samples as (name, labels, value) triples."""
        return [(self.name + suffix, labels, value) for suffix, labels, value in self._values()]


class Counter(_Metric):
    """A value that only ever increases."""

    type_name = "counter"

    def __init__(self, name: str, help: str = "", **kwargs: str) -> None:
        super().__init__(name, help, **kwargs)
        self.value = 0.0

    def inc(self) -> None:
        """Increase the counter by one."""
        self.add(1.0)

    def add(self, value: float) -> None:
        """Increase the counter by a non-negative value."""
        if value < 0:
            raise ValueError("counter cannot decrease in value")
        with self._lock:
            self.value += value

    def _values(self):
        yield "", {}, self.value


class Gauge(_Metric):
    """A value that can go up and down."""

    type_name = "gauge"

    def __init__(self, name: str, help: str = "", **kwargs: str) -> None:
        super().__init__(name, help, **kwargs)
        self.value = 0.0

    def inc(self) -> None:
        """Increase the gauge by one."""
        self.add(1.0)

    def dec(self) -> None:
        """Decrease the gauge by one."""
        self.add(-1.0)

    def add(self, value: float) -> None:
        """Add a value, which may be negative."""
        with self._lock:
            self.value += value

    def sub(self, value: float) -> None:
        """Subtract a value, which may be negative."""
        self.add(-value)

    def set(self, value: float) -> None:
        """Set the gauge to a value."""
        with self._lock:
            self.value = float(value)

    def set_to_current_time(self) -> None:
        """Set the gauge to the current Unix time in seconds."""
        self.set(time.time())

    def _values(self):
        yield "", {}, self.value


class Summary(_Metric):
    """Observations summarised by count, sum and target quantiles."""

    type_name = "summary"

    def __init__(
        self,
        name: str,
        help: str = "",
        *,
        objectives: Optional[Mapping[float, float]] = None,
        **kwargs: str,
    ) -> None:
        super().__init__(name, help, **kwargs)
        objectives = dict(objectives or {})
        for quantile in objectives:
            if not 0 <= quantile <= 1:
                raise ValueError(f"quantile {quantile} must be between 0 and 1")
        self.objectives = objectives
        self.count = 0
        self.sum = 0.0
        self._observations: list[float] = []

    def observe(self, value: float) -> None:
        """Record an observation."""
        with self._lock:
            self.count += 1
            self.sum += value
            self._observations.append(float(value))

    def quantile(self, q: float) -> float:
        """Return the observed value at quantile ``q``, or NaN when nothing was observed."""
        with self._lock:
            ordered = sorted(self._observations)
        if not ordered:
            return math.nan
        rank = min(len(ordered) - 1, max(0, math.ceil(q * len(ordered)) - 1))
        return ordered[rank]

    def _values(self):
        for q in sorted(self.objectives):
            yield "", {"quantile": _format_value(q)}, self.quantile(q)
        yield "_sum", {}, self.sum
        yield "_count", {}, float(self.count)


class Histogram(_Metric):
    """Observations counted in cumulative buckets."""

    type_name = "histogram"

    def __init__(
        self,
        name: str,
        help: str = "",
        *,
        buckets: Optional[Sequence[float]] = None,
        **kwargs: str,
    ) -> None:
        super().__init__(name, help, **kwargs)
        bounds = list(DEFAULT_BUCKETS if buckets is None else buckets)
        if bounds != sorted(bounds):
            raise ValueError("histogram buckets must be in increasing order")
        self.buckets = tuple(float(b) for b in bounds)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0

    def observe(self, value: float) -> None:
        """Record an observation."""
        with self._lock:
            self.count += 1
            self.sum += value
            for index, bound in enumerate(self.buckets):
                if value <= bound:
                    self.bucket_counts[index] += 1

    def _values(self):
        for bound, count in zip(self.buckets, self.bucket_counts):
            yield "_bucket", {"le": _format_value(bound)}, float(count)
        yield "_bucket", {"le": "+Inf"}, float(self.count)
        yield "_sum", {}, self.sum
        yield "_count", {}, float(self.count)


class _MetricVec:
    child_class: type = _Metric

    def __init__(
        self,
        name: str,
        help: str = "",
        label_names: Sequence[str] = (),
        *,
        subsystem: str = "",
        namespace: str = "",
        **child_options,
    ) -> None:
        if not name:
            raise ValueError("metric name cannot be empty")
        self.label_names = tuple(label_names)
        if len(set(self.label_names)) != len(self.label_names):
            raise ValueError("duplicate label names")
        self.desc = Desc(_full_name(namespace, subsystem, name), help, self.label_names)
        self._child_options = child_options
        self._children: dict[tuple[str, ...], _Metric] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.desc.fq_name

    @property
    def type_name(self) -> str:
        return self.child_class.type_name

    def with_label_values(self, *values: str):
        """Return the child metric for label values given in label-name order."""
        if len(values) != len(self.label_names):
            raise ValueError(
                f"inconsistent label cardinality: expected {len(self.label_names)} label values "
                f"but got {len(values)}"
            )
        key = tuple(str(v) for v in values)
        with self._lock:
            child = self._children.get(key)
            if child is None:
                child = self.child_class(self.name, self.desc.help, **self._child_options)
                self._children[key] = child
            return child

    def get_metric_with(self, labels: Mapping[str, str]):
        """Return the child metric for a mapping of label names to values."""
        if set(labels) != set(self.label_names):
            raise ValueError(
                f"inconsistent label names: expected {sorted(self.label_names)}, got {sorted(labels)}"
            )
        return self.with_label_values(*(labels[name] for name in self.label_names))

    def samples(self) -> list[_Sample]:
        """Return the samples of every child, labelled with its label values."""
        with self._lock:
            children = list(self._children.items())
        result = []
        for key, child in children:
            base = dict(zip(self.label_names, key))
            for name, labels, value in child.samples():
                result.append((name, {**base, **labels}, value))
        return result


class CounterVec(_MetricVec):
    """Counters partitioned by label values."""

    child_class = Counter

    def with_label_values(self, *args: str) -> Counter:
        """Return the counter for label values given in label-name order."""
        return super().with_label_values(*args)

    def get_metric_with(self, labels: Mapping[str, str]) -> Counter:
        """Return the counter for a mapping of label names to values."""
        return super().get_metric_with(labels)


class GaugeVec(_MetricVec):
    """Gauges partitioned by label values."""

    child_class = Gauge


class SummaryVec(_MetricVec):
    """Summaries partitioned by label values."""

    child_class = Summary


class HistogramVec(_MetricVec):
    """Histograms partitioned by label values."""

    child_class = Histogram


class Registry:
    """A collection of metrics with unique names."""

    def __init__(self) -> None:
        self._metrics: dict[str, object] = {}
        self._lock = threading.Lock()

    def register(self, metric) -> None:
        """Add a metric; raise DuplicateMetricError if its name is taken."""
        with self._lock:
            if metric.name in self._metrics:
                raise DuplicateMetricError(
                    f"duplicate metrics collector registration attempted: {metric.name}"
                )
            self._metrics[metric.name] = metric

    def unregister(self, metric) -> bool:
        """Remove a metric; return whether it was registered."""
        with self._lock:
            if self._metrics.get(metric.name) is metric:
                del self._metrics[metric.name]
                return True
            return False

    def collect(self) -> list:
        """Return the registered metrics ordered by name."""
        with self._lock:
            return [self._metrics[name] for name in sorted(self._metrics)]

    def expose(self) -> str:
        """Render every registered metric in the text exposition format."""
        lines = []
        for metric in self.collect():
            lines.append(f"# HELP {metric.name} {metric.desc.help}")
            lines.append(f"# TYPE {metric.name} {metric.type_name}")
            for name, labels, value in metric.samples():
                if labels:
                    rendered = ",".join(
                        f'{key}="{_escape(val)}"' for key, val in sorted(labels.items())
                    )
                    lines.append(f"{name}{{{rendered}}} {_format_value(value)}")
                else:
                    lines.append(f"{name} {_format_value(value)}")
        return "\n".join(lines) + ("\n" if lines else "")


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


DEFAULT_REGISTRY = Registry()