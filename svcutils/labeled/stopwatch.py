"""A stopwatch labeled with values taken from a context."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from svcutils.labeled.keys import get_metric_keys, get_unlabeled_metric_name, label_values
from svcutils.labeled.options import AdditionalLabelsOption, EmitUnlabeledMetricOption, MetricOption
from svcutils.labeled.timer import MultiTimer
from svcutils.scope import Duration, Scope, StopWatch, StopWatchVec, Timer


class LabeledStopWatch:
    """A stopwatch whose labels come from the context of each call.

    Percentiles are computed per label combination; with the unlabeled
    option an extra stopwatch gives percentiles across all labels.
    """

    def __init__(
        self,
        name: str,
        description: str,
        scale: Duration,
        scope: Scope,
        *options: MetricOption,
    ) -> None:
        metric_keys = get_metric_keys()
        self.unlabeled: Optional[StopWatch] = None
        self.stop_watch_vec: Optional[StopWatchVec] = None
        additional: tuple[str, ...] = ()

        for option in options:
            if isinstance(option, EmitUnlabeledMetricOption):
                self.unlabeled = scope.new_stop_watch(
                    get_unlabeled_metric_name(name), description, scale
                )
            elif isinstance(option, AdditionalLabelsOption):
                additional = option.labels
                self.stop_watch_vec = scope.new_stop_watch_vec(
                    name, description, scale, *metric_keys, *additional
                )

        if self.stop_watch_vec is None:
            self.stop_watch_vec = scope.new_stop_watch_vec(name, description, scale, *metric_keys)
        self._label_keys = metric_keys + additional

    def _labeled(self, context: Optional[Mapping[str, Any]]) -> StopWatch:
        return self.stop_watch_vec.get_metric_with(label_values(context, self._label_keys))

    def start(self, context: Optional[Mapping[str, Any]]) -> Union[Timer, MultiTimer]:
        """Start a timer labeled from ``context``; stop it to record."""
        timer = self._labeled(context).start()
        if self.unlabeled is None:
            return timer
        return MultiTimer([timer, self.unlabeled.start()])

    def observe(self, context: Optional[Mapping[str, Any]], start: datetime, end: datetime) -> None:
        """Record the duration between two points in time."""
        self._labeled(context).observe(start, end)
        if self.unlabeled is not None:
            self.unlabeled.observe(start, end)

    def time(self, context: Optional[Mapping[str, Any]], func: Callable[[], Any]) -> Any:
        """Call ``func``, record how long it took, and return its result."""
        timer = self.start(context)
        try:
            return func()
        finally:
            timer.stop()