"""The process-wide context keys whose values label metrics."""

from __future__ import annotations

import threading
from typing import Any, Iterable, Mapping, Optional

_ALREADY_SET = "cannot set metric keys more than once"
_EMPTY = "cannot set metric keys to an empty set"
_NEVER_SET = "must call set_metric_keys prior to using labeled package"

_lock = threading.Lock()
_metric_keys: tuple[str, ...] = ()


class MetricKeysError(RuntimeError):
    """Raised when metric keys are missing, empty or set to conflicting values."""


def set_metric_keys(*keys: str) -> None:
    """Set the context keys used to label metrics; they may be set only once."""
    global _metric_keys
    if not keys:
        raise MetricKeysError(_EMPTY)
    wanted = tuple(str(key) for key in keys)
    with _lock:
        if not _metric_keys:
            _metric_keys = wanted
            return
        current = _metric_keys
    if wanted != current:
        raise MetricKeysError(_ALREADY_SET)


def get_metric_keys() -> tuple[str, ...]:
    """Return the metric keys; raise MetricKeysError if they were never set."""
    with _lock:
        keys = _metric_keys
    if not keys:
        raise MetricKeysError(_NEVER_SET)
    return keys


def get_unlabeled_metric_name(metric_name: str) -> str:
    """Return the name of the unlabeled companion of a metric."""
    return metric_name + "_unlabeled"


def unset_metric_keys() -> None:
    """Forget the metric keys so that they can be set again."""
    global _metric_keys
    with _lock:
        _metric_keys = ()


def label_values(context: Optional[Mapping[str, Any]], keys: Iterable[str]) -> dict[str, str]:
    """Return the values of ``keys`` in ``context``, with "" for missing ones."""
    context = context or {}
    result = {}
    for key in keys:
        value = context.get(key)
        result[key] = "" if value is None else str(value)
    return result