"""Options that change which metrics a labeled metric emits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class MetricOption:
    """Base class of options for labeled metrics."""


@dataclass(frozen=True)
class EmitUnlabeledMetricOption(MetricOption):
    """Also emit an unlabeled metric, giving an overall view across labels."""


@dataclass(frozen=True)
class AdditionalLabelsOption(MetricOption):
    """Extra context keys, used by this metric only, to label it with."""

    labels: tuple[str, ...] = ()

    def __init__(self, labels: Iterable[str] = ()) -> None:
        object.__setattr__(self, "labels", tuple(labels))


EMIT_UNLABELED_METRIC = EmitUnlabeledMetricOption()