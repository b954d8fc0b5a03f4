from datetime import datetime, timedelta

import pytest

from svcutils.metrics import DuplicateMetricError, Registry
from svcutils.scope import SummaryOptions, duration_to_string, new_scope, new_test_scope


@pytest.mark.parametrize(
    "duration, expected",
    [
        (timedelta(minutes=1), "m"),
        (timedelta(minutes=10), "m"),
        (timedelta(hours=1), "h"),
        (timedelta(hours=10), "h"),
        (timedelta(seconds=1), "s"),
        (timedelta(seconds=10), "s"),
        (timedelta(microseconds=10), "us"),
        (timedelta(microseconds=1), "us"),
        (timedelta(milliseconds=10), "ms"),
        (timedelta(milliseconds=1), "ms"),
        (1, "ns"),
    ],
)
def test_duration_to_string(duration, expected):
    assert duration_to_string(duration) == expected


def test_new_scope():
    with pytest.raises(ValueError):
        new_scope("", Registry())
    s = new_scope("test", Registry())
    assert s.current_scope() == "test:"
    assert s.new_sub_scope("hello").current_scope() == "test:hello:"
    with pytest.raises(ValueError):
        s.new_sub_scope("")
    assert s.new_scoped_metric_name("timer_x") == "test:timer_x"
    assert s.new_sub_scope("hello").new_sub_scope("timer").current_scope() == "test:hello:timer:"
    assert s.new_sub_scope("hello").new_sub_scope("timer:").current_scope() == "test:hello:timer:"


def _desc(name):
    return f'Desc{{fqName: "{name}", help: "some x", constLabels: {{}}, variableLabels: []}}'


@pytest.fixture
def scope():
    return new_scope("test", Registry())


def test_counter(scope):
    m = scope.new_counter("xc", "some x")
    assert str(m.desc) == _desc("test:xc")
    scope.new_counter_vec("xcv", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_counter("xc", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_counter_vec("xcv", "some x")


def test_histogram(scope):
    m = scope.new_histogram("xh", "some x")
    assert str(m.desc) == _desc("test:xh")
    scope.new_histogram_vec("xhv", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_histogram("xh", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_histogram_vec("xhv", "some x")


def test_summary(scope):
    m = scope.new_summary("xs", "some x")
    assert str(m.desc) == _desc("test:xs")
    mco = scope.new_summary_with_options("xsco", "some x", SummaryOptions({0.5: 0.05, 1.0: 0.0}))
    assert str(mco.desc) == _desc("test:xsco")
    scope.new_summary_vec("xsv", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_summary("xs", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_summary_vec("xsv", "some x")


def test_gauge(scope):
    m = scope.new_gauge("xg", "some x")
    assert str(m.desc) == _desc("test:xg")
    scope.new_gauge_vec("xgv", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_gauge("xg", "some x")
    with pytest.raises(DuplicateMetricError):
        scope.new_gauge_vec("xgv", "some x")


def test_timer(scope):
    m = scope.new_stop_watch("xt", "some x", timedelta(seconds=1))
    assert str(m.observer.desc) == _desc("test:xt_s")
    with pytest.raises(DuplicateMetricError):
        scope.new_stop_watch("xt", "some x", timedelta(seconds=1))


def test_stop_watch_start():
    s = new_test_scope(Registry()).new_stop_watch("yt", "timer", timedelta(milliseconds=1))
    assert s.output_scale == timedelta(milliseconds=1)
    t = s.start()
    assert t.output_scale == timedelta(milliseconds=1)
    assert t.stop() >= 0
    assert s.observer.count == 1


def test_stop_watch_observe():
    s = new_test_scope(Registry()).new_stop_watch("yt", "timer", timedelta(milliseconds=1))
    now = datetime.now()
    s.observe(now, now + timedelta(seconds=1))
    assert s.observer.sum == 1000


def test_stop_watch_time():
    s = new_test_scope(Registry()).new_stop_watch("yt", "timer", timedelta(milliseconds=1))
    assert s.time(lambda: "done") == "done"
    assert s.observer.count == 1


def test_stop_watch_vec_with_label_values():
    v = new_test_scope(Registry()).new_stop_watch_vec(
        "yt", "timer", timedelta(milliseconds=1), "workflow", "label"
    )
    assert v.output_scale == timedelta(milliseconds=1)
    s = v.with_label_values("my_wf", "something")
    with s.start() as t:
        assert t.output_scale == timedelta(milliseconds=1)
    assert s.observer.count == 1
    assert v.get_metric_with({"workflow": "my_wf", "label": "something"}).observer is s.observer


def test_test_scope_names_are_alphabetic():
    s = new_test_scope(Registry())
    name = s.current_scope()
    assert name.startswith("test") and name.endswith(":")
    assert name[:-1].isalpha()