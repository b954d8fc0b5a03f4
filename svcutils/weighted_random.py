"""Random selection from a list of items with individual weights."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable, Union

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entry:
    """An item to select from, with a weight between 0 and 1."""

    item: Any
    weight: float = 0.0


@dataclass(frozen=True)
class _CumulativeEntry:
    item: Any
    current_total: float


def _validate(entries: list[Entry]) -> None:
    if not entries:
        raise ValueError("entries is empty")
    for index, entry in enumerate(entries):
        if entry.item is None:
            raise ValueError(f"invalid entry: None, index {index}")
        if entry.weight < 0 or entry.weight > 1:
            raise ValueError(f"invalid weight {entry.weight:f}, index {index}")


class WeightedRandomList:
    """Selects items randomly, taking their weights into account.

    Items are ordered by their natural ordering (``<``), so that a given seed
    always selects the same item. Entries with zero weight are ignored, unless
    every weight is zero, in which case all items are equally likely.
    """

    def __init__(self, entries: Iterable[Entry]) -> None:
        entries = list(entries)
        _validate(entries)
        ordered = sorted(entries, key=lambda entry: entry.item)
        total_weight = sum(entry.weight for entry in ordered)
        equal_share = 1.0 / len(ordered)

        self._entries: list[_CumulativeEntry] = []
        current_total = 0.0
        for entry in ordered:
            if total_weight == 0:
                current_total += equal_share
            elif entry.weight == 0:
                _log.debug("ignoring entry due to empty weight %r", entry)
                continue
            current_total += entry.weight
            self._entries.append(_CumulativeEntry(entry.item, current_total))
        self._total_weight = current_total

    def _select(self, generator: random.Random) -> Any:
        target = generator.random() * self._total_weight
        return next(
            (
                entry.item
                for entry in self._entries
                if entry.current_total >= target and entry.current_total > 0
            ),
            self._entries[-1].item,
        )

    def get(self) -> Any:
        """Return a random item according to the weights."""
        return self._select(random.Random())

    def get_with_seed(self, seed: Union[int, random.Random]) -> Any:
        """Return an item chosen with the given seed or generator; a seed always gives the same item."""
        generator = seed if isinstance(seed, random.Random) else random.Random(seed)
        return self._select(generator)

    def list(self) -> list[Any]:
        """Return the items eligible for selection, in selection order."""
        return [entry.item for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)