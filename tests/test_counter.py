import pytest

from svcutils.labeled.counter import LabeledCounter
from svcutils.labeled.keys import MetricKeysError, set_metric_keys, unset_metric_keys
from svcutils.labeled.options import EMIT_UNLABELED_METRIC, AdditionalLabelsOption
from svcutils.metrics import DuplicateMetricError, Registry
from svcutils.scope import new_scope


@pytest.fixture
def keys():
    unset_metric_keys()
    set_metric_keys("project", "domain", "wf", "task", "lp")
    yield
    unset_metric_keys()


@pytest.fixture
def scope():
    return new_scope("testscope", Registry())


def test_labeled_counter(keys, scope):
    counter = LabeledCounter("lbl_counter", "help", scope)
    ctx = {}
    counter.inc(ctx)
    counter.add(ctx, 1.0)
    assert counter.counter_vec.with_label_values("", "", "", "", "").value == 2.0

    ctx = {"project": "project", "domain": "domain"}
    counter.inc(ctx)
    counter.add(ctx, 1.0)
    assert counter.counter_vec.with_label_values("project", "domain", "", "", "").value == 2.0

    ctx = {**ctx, "task": "task"}
    counter.inc(ctx)
    counter.add(ctx, 1.0)
    assert counter.counter_vec.with_label_values("project", "domain", "", "task", "").value == 2.0

    ctx = {**ctx, "lp": "lp"}
    counter.inc(ctx)
    counter.add(ctx, 1.0)
    assert counter.counter_vec.with_label_values("project", "domain", "", "task", "lp").value == 2.0
    assert counter.unlabeled is None


def test_requires_metric_keys(scope):
    unset_metric_keys()
    with pytest.raises(MetricKeysError):
        LabeledCounter("c", "help", scope)


def test_unlabeled_counter_sums_all(keys, scope):
    counter = LabeledCounter("c", "help", scope, EMIT_UNLABELED_METRIC)
    counter.inc({"project": "a"})
    counter.add({"project": "b"}, 2.5)
    assert counter.unlabeled.value == 3.5
    assert counter.unlabeled.name == "testscope:c_unlabeled"


def test_additional_labels(keys, scope):
    counter = LabeledCounter("c", "help", scope, AdditionalLabelsOption(["bearing"]))
    counter.inc({"bearing": "north"})
    assert counter.counter_vec.desc.variable_labels == ("project", "domain", "wf", "task", "lp", "bearing")
    assert counter.counter_vec.with_label_values("", "", "", "", "", "north").value == 1.0


def test_negative_add_fails(keys, scope):
    counter = LabeledCounter("c", "help", scope)
    with pytest.raises(ValueError):
        counter.add({}, -1.0)


def test_duplicate_name_fails(keys, scope):
    LabeledCounter("c", "help", scope)
    with pytest.raises(DuplicateMetricError):
        LabeledCounter("c", "help", scope)