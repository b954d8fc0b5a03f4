"""A gauge labeled with values taken from a context."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from svcutils.labeled.keys import get_metric_keys, get_unlabeled_metric_name, label_values
from svcutils.labeled.options import AdditionalLabelsOption, EmitUnlabeledMetricOption, MetricOption
from svcutils.metrics import Gauge, GaugeVec
from svcutils.scope import Scope


class LabeledGauge:
    """A gauge whose labels come from the context of each call.

    With the unlabeled option, a companion gauge named with an ``_unlabeled``
    suffix receives every update as well.
    """

    def __init__(self, name: str, description: str, scope: Scope, *options: MetricOption) -> None:
        metric_keys = get_metric_keys()
        self.unlabeled: Optional[Gauge] = None
        self.gauge_vec: Optional[GaugeVec] = None
        additional: tuple[str, ...] = ()

        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_gauge(get_unlabeled_metric_name(name), description)
            elif isinstance(option, AdditionalLabelsOption):
                additional = option.labels
                self.gauge_vec = scope.new_gauge_vec(name, description, *metric_keys, *additional)

        if self.gauge_vec is None:
            self.gauge_vec = scope.new_gauge_vec(name, description, *metric_keys)
        self._label_keys = metric_keys + additional

    def _targets(self, context: Optional[Mapping[str, Any]]) -> list[Gauge]:
        targets = [self.gauge_vec.get_metric_with(label_values(context, self._label_keys))]
        if self.unlabeled is not None:
            targets.append(self.unlabeled)
        return targets

    def inc(self, context: Optional[Mapping[str, Any]]) -> None:
        """Increase the gauge by one."""
        for gauge in self._targets(context):
            gauge.inc()

    def add(self, context: Optional[Mapping[str, Any]], value: float) -> None:
        """Add a value, which may be negative."""
        for gauge in self._targets(context):
            gauge.add(value)

    def set(self, context: Optional[Mapping[str, Any]], value: float) -> None:
        """Set the gauge to a value."""
        for gauge in self._targets(context):
            gauge.set(value)

    def dec(self, context: Optional[Mapping[str, Any]]) -> None:
        """Decrease the gauge by one."""
        for gauge in self._targets(context):
            gauge.dec()

    def sub(self, context: Optional[Mapping[str, Any]], value: float) -> None:
        """Subtract a value, which may be negative."""
        for gauge in self._targets(context):
            gauge.sub(value)

    def set_to_current_time(self, context: Optional[Mapping[str, Any]]) -> None:
        """Set the gauge to the current Unix time in seconds."""
        for gauge in self._targets(context):
            gauge.set_to_current_time()