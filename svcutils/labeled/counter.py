"""A counter labeled with values taken from a context."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from svcutils.labeled.keys import get_metric_keys, get_unlabeled_metric_name, label_values
from svcutils.labeled.options import AdditionalLabelsOption, EmitUnlabeledMetricOption, MetricOption
from svcutils.metrics import Counter, CounterVec
from svcutils.scope import Scope


class LabeledCounter:
    """A counter whose labels come from the context of each call.

    Metric keys must be set with ``set_metric_keys`` before one is created.
    """

    def __init__(self, name: str, description: str, scope: Scope, *options: MetricOption) -> None:
        metric_keys = get_metric_keys()
        self.unlabeled: Optional[Counter] = None
        self.counter_vec: Optional[CounterVec] = None
        additional: tuple[str, ...] = ()

        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_counter(get_unlabeled_metric_name(name), description)
            elif isinstance(option, AdditionalLabelsOption):
                additional = option.labels
                self.counter_vec = scope.new_counter_vec(
                    name, description, *metric_keys, *additional
                )

        if self.counter_vec is None:
            self.counter_vec = scope.new_counter_vec(name, description, *metric_keys)
        self._label_keys = metric_keys + additional

    def _child(self, context: Optional[Mapping[str, Any]]) -> Counter:
        return self.counter_vec.get_metric_with(label_values(context, self._label_keys))

    def inc(self, context: Optional[Mapping[str, Any]]) -> None:
        """Increase by one the counter labeled from ``context``."""
        self._child(context).inc()
        if self.unlabeled is not None:
            self.unlabeled.inc()

    def add(self, context: Optional[Mapping[str, Any]], value: float) -> None:
        """Add a non-negative value to the counter labeled from ``context``."""
        self._child(context).add(value)
        if self.unlabeled is not None:
            self.unlabeled.add(value)