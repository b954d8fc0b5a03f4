# svcutils

Small building blocks for long-running services:

- **Metrics** (`svcutils.metrics`): an in-process `Registry` holding
  `Counter`, `Gauge`, `Summary` and `Histogram` metrics and their labelled
  variants (`CounterVec`, `GaugeVec`, `SummaryVec`, `HistogramVec`), which it
  renders in the Prometheus text exposition format with `Registry.expose()`.
- **Scopes and stopwatches** (`svcutils.scope`): create metrics under a nested
  name prefix such as `service:component:`, and time code into summaries.
- **Work queue metrics** (`svcutils.workqueue`): `PrometheusMetricsProvider`
  creates the depth, adds, latency, work duration, retries and
  running-processor metrics a work queue reports.
- **Labeled metrics** (`svcutils.labeled`): counters, gauges and stopwatches
  whose label values are taken from a context mapping at call time.
- **Protobuf hashing** (`svcutils.pbhash`): a deterministic SHA-256 object hash
  of a protobuf message, stable under map reordering and unset fields.
- **Weighted random selection** (`svcutils.weighted_random`).
- **Generic sets** keyed by an object's id (`svcutils.sets`).
- **Profiling server** (`svcutils.profutils`) with `/healthcheck`, `/metrics`,
  `/version` and `/config` endpoints.

## Installation

```
pip install svcutils
```

For running the tests:

```
pip install "svcutils[test]"
pytest
```

## Scoped metrics

```python
from datetime import timedelta

from svcutils.metrics import Registry
from svcutils.scope import new_scope

registry = Registry()
scope = new_scope("myservice", registry)      # "myservice:"
requests = scope.new_counter("requests", "Requests handled")
requests.inc()

db = scope.new_sub_scope("db")
print(db.current_scope())                     # "myservice:db:"

# Named "myservice:db:query_ms"; durations are recorded in whole milliseconds.
latency = db.new_stop_watch("query", "Query latency", timedelta(milliseconds=1))
with latency.start():
    ...
latency.time(lambda: None)

print(registry.expose())
```

Scales are given as a `timedelta` or as an integer number of nanoseconds;
`duration_to_string` gives the unit suffix (`h`, `m`, `s`, `ms`, `us`, `ns`)
appended to stopwatch names. Without a registry, `new_scope` uses
`svcutils.metrics.DEFAULT_REGISTRY`. `new_test_scope()` returns a randomly
named scope for tests.

Registering the same metric name twice in a registry raises
`DuplicateMetricError`. Empty scope or metric names raise `ValueError`.

Summaries keep every observation and report exact quantiles for their
objectives (by default 0.5, 0.9 and 0.99); histograms use cumulative buckets.

## Labeled metrics

```python
from datetime import timedelta

from svcutils.labeled.counter import LabeledCounter
from svcutils.labeled.gauge import LabeledGauge
from svcutils.labeled.keys import set_metric_keys
from svcutils.labeled.options import AdditionalLabelsOption, EMIT_UNLABELED_METRIC
from svcutils.labeled.stopwatch import LabeledStopWatch

set_metric_keys("project", "domain")

counter = LabeledCounter("events", "Events seen", scope, EMIT_UNLABELED_METRIC)
counter.inc({"project": "alpha", "domain": "dev"})

gauge = LabeledGauge("queue", "Queue size", scope, AdditionalLabelsOption(["bearing"]))
gauge.set({"project": "alpha", "bearing": "123"}, 42)

watch = LabeledStopWatch("step", "Step time", timedelta(seconds=1), scope)
with watch.start({"project": "alpha"}):
    ...
```

Metric keys are set once per process; setting them again to the same keys is
accepted, to different keys raises `MetricKeysError`, as does creating a
labeled metric before any keys are set. `unset_metric_keys()` clears them.
Keys missing from the context are recorded with an empty label value. With
the unlabeled option, a companion metric named with an `_unlabeled` suffix
receives every update as well.

## Protobuf hashing

```python
from svcutils.pbhash import common_json_hash, compute_hash, compute_hash_string

digest = compute_hash(message)          # 32 bytes
text = compute_hash_string(message)     # base64
common_json_hash('{"a": 1}')            # hash of a JSON document
```

The message is rendered in its canonical JSON form and object-hashed; numbers
in JSON are hashed as floats. `object_hash` hashes any JSON-like value.

## Weighted random selection

```python
from svcutils.weighted_random import Entry, WeightedRandomList

choices = WeightedRandomList([Entry("a", 0.3), Entry("b", 0.7)])
choices.get()
choices.get_with_seed(42)   # deterministic for a given seed
choices.list()              # eligible items, in selection order
len(choices)
```

Weights must lie between 0 and 1 and items may not be `None` (otherwise
`ValueError`); items are ordered by `<`. Entries with weight 0 are ignored
unless all weights are 0, in which case every entry is equally likely.

## Generic sets

```python
from svcutils.sets import GenericSet

s = GenericSet(a, b)
s.list_keys()
s.union(other)
s.intersection(other)
s.pop_any()                 # KeyError when empty
```

Items are any objects with a `get_id()` method; items with the same id are
the same member.

## Profiling server

```python
from svcutils.profutils import BuildVersion, start_profiling_server_with_default_handlers

start_profiling_server_with_default_handlers(
    10254,
    None,
    BuildVersion(build="abc", version="1.0", timestamp="now"),
    registry,
    lambda: {"logger": {"level": 4}},
)
```

This blocks, serving until shut down. `make_server(port, handlers)` creates
the server without starting it, and `default_handlers(...)` returns the four
handlers keyed by path for use with your own routes. Handlers are called with
a response writer and the request; `write_string_response` and
`write_json_response` write to it.

## What it does not do

- There is no configuration system: `/config` returns whatever mapping the
  `config_provider` callable returns, or `{}` without one.
- Build details for `/version` are passed in as a `BuildVersion`; they are not
  read from the environment.
- The server offers no runtime profiling endpoints beyond the four above.
- Metrics live in this package's own registry; nothing is pushed anywhere,
  and there is no installed command.