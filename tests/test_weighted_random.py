import random
from dataclasses import dataclass

import pytest

from svcutils.weighted_random import Entry, WeightedRandomList


@dataclass(frozen=True)
class SampleItem:
    key: str
    val: int = 0

    def __lt__(self, other):
        if "sort" in self.key:
            return self.key < other.key
        return self.val < other.val


class FixedRandom(random.Random):
    """A generator whose random() always returns the same value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def test_weighted_by_string_order():
    item1 = SampleItem("sort_key1", 1)
    item2 = SampleItem("sort_key2", 2)
    rw = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    assert rw.list() == [item1, item2]
    assert rw.get_with_seed(FixedRandom(0.3)) == item1
    assert rw.get_with_seed(FixedRandom(0.5)) == item2
    assert rw.get_with_seed(FixedRandom(0.99)) == item2


def test_weighted_by_int_order():
    item1 = SampleItem("key1", 4)
    item2 = SampleItem("key2", 3)
    rw = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    assert rw.list() == [item2, item1]
    assert rw.get_with_seed(FixedRandom(0.3)) == item2
    assert rw.get_with_seed(FixedRandom(0.9)) == item1


@pytest.mark.parametrize("seed", [1, 10, 20])
def test_same_seed_same_item(seed):
    item1 = SampleItem("sort_key1", 1)
    item2 = SampleItem("sort_key2", 2)
    rw = WeightedRandomList([Entry(item1, 0.4), Entry(item2, 0.6)])
    first = rw.get_with_seed(seed)
    assert first in (item1, item2)
    for _ in range(10):
        assert rw.get_with_seed(seed) == first


def test_few_zero_weight():
    item1 = SampleItem("key1", 4)
    item2 = SampleItem("key2", 3)
    rw = WeightedRandomList([Entry(item1, 0.4), Entry(item2)])
    assert rw.get_with_seed(20) == item1
    for _ in range(10):
        assert rw.get_with_seed(10) == item1
    assert rw.get_with_seed(FixedRandom(0.0)) == item1
    assert rw.get_with_seed(FixedRandom(0.99)) == item1


def test_all_zero_weights_share_equally():
    item1 = SampleItem("sort_key1", 4)
    item2 = SampleItem("sort_key2", 3)
    rw = WeightedRandomList([Entry(item1), Entry(item2)])
    assert rw.list() == [item1, item2]
    assert rw.get_with_seed(FixedRandom(0.2)) == item1
    assert rw.get_with_seed(FixedRandom(0.7)) == item2
    for _ in range(10):
        assert rw.get_with_seed(20) == rw.get_with_seed(20)


def test_list_ignores_zero_weight():
    item1 = SampleItem("key1", 4)
    item2 = SampleItem("key2", 3)
    rw = WeightedRandomList([Entry(item1, 0.3), Entry(item2)])
    assert rw.list() == [item1]


def test_list_zero_weights():
    item1 = SampleItem("key1", 4)
    item2 = SampleItem("key2", 3)
    rw = WeightedRandomList([Entry(item1), Entry(item2)])
    assert rw.list() == [item2, item1]


def test_len():
    rw = WeightedRandomList([Entry(SampleItem("key1")), Entry(SampleItem("key2"))])
    assert len(rw) == 2


def test_invalid_weight():
    entries = [Entry(SampleItem("key1", 4), -3.0), Entry(SampleItem("key2", 3))]
    with pytest.raises(ValueError, match=r"^invalid weight -3\.000000, index 0$"):
        WeightedRandomList(entries)


def test_weight_above_one():
    entries = [Entry(SampleItem("key1", 4)), Entry(SampleItem("key2", 3), 1.5)]
    with pytest.raises(ValueError, match=r"^invalid weight 1\.500000, index 1$"):
        WeightedRandomList(entries)


def test_invalid_entry():
    entries = [Entry(None), Entry(SampleItem("key2", 3))]
    with pytest.raises(ValueError, match=r"^invalid entry: None, index 0$"):
        WeightedRandomList(entries)


def test_empty_entries():
    with pytest.raises(ValueError, match="entries is empty"):
        WeightedRandomList([])


def test_get_returns_eligible_item():
    item1 = SampleItem("key1", 4)
    item2 = SampleItem("key2", 3)
    rw = WeightedRandomList([Entry(item1, 1.0), Entry(item2)])
    for _ in range(20):
        assert rw.get() == item1