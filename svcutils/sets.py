"""A set of objects keyed by their string identifiers."""

from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class SetObject(Protocol):
    """An object that can be stored in a :class:`GenericSet`."""

    def get_id(self) -> str:
        """Return the identifier the object is stored under."""


class GenericSet:
    """A set of :class:`SetObject` items, where identity is given by ``get_id()``."""

    __slots__ = ("_items",)

    def __init__(self, *items: SetObject) -> None:
        self._items: dict[str, SetObject] = {}
        self.insert(*items)

    def insert(self, *items: SetObject) -> None:
        """Add items, replacing any stored under the same identifier."""
        for item in items:
            self._items[item.get_id()] = item

    def delete(self, *items: SetObject) -> None:
        """Remove items; identifiers that are absent are ignored."""
        for item in items:
            self._items.pop(item.get_id(), None)

    def has(self, item: SetObject) -> bool:
        """Return True if an item with the same identifier is in the set."""
        return item.get_id() in self._items

    def has_all(self, *items: SetObject) -> bool:
        """Return True if every item is in the set."""
        return all(self.has(item) for item in items)

    def has_any(self, *items: SetObject) -> bool:
        """Return True if at least one item is in the set."""
        return any(self.has(item) for item in items)

    def difference(self, other: GenericSet) -> GenericSet:
        """Return the items of this set that are not in ``other``."""
        return GenericSet(*(item for item in self._items.values() if not other.has(item)))

    def union(self, other: GenericSet) -> GenericSet:
        """Return a new set holding the items of both sets."""
        result = GenericSet(*self._items.values())
        result.insert(*other._items.values())
        return result

    def intersection(self, other: GenericSet) -> GenericSet:
        """Return a new set holding the items present in both sets."""
        walk, probe = (self, other) if len(self) < len(other) else (other, self)
        return GenericSet(*(item for item in walk if probe.has(item)))

    def is_superset(self, other: GenericSet) -> bool:
        """Return True if every item of ``other`` is in this set."""
        return all(self.has(item) for item in other)

    def equal(self, other: GenericSet) -> bool:
        """Return True if both sets hold the same identifiers."""
        return len(self) == len(other) and self.is_superset(other)

    def list_keys(self) -> list[str]:
        """Return the identifiers in sorted order."""
        return sorted(self._items)

    def list(self) -> list[SetObject]:
        """Return the items ordered by identifier."""
        return [self._items[key] for key in self.list_keys()]

    def unsorted_list_keys(self) -> list[str]:
        """Return the identifiers in no particular order."""
        return list(self._items)

    def unsorted_list(self) -> list[SetObject]:
        """Return the items in no particular order."""
        return list(self._items.values())

    def pop_any(self) -> SetObject:
        """Remove and return an arbitrary item; raise KeyError if the set is empty."""
        if not self._items:
            raise KeyError("pop from an empty set")
        _, item = self._items.popitem()
        return item

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return isinstance(item, SetObject) and self.has(item)

    def __iter__(self) -> Iterator[SetObject]:
        return iter(list(self._items.values()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GenericSet):
            return NotImplemented
        return self.equal(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GenericSet({', '.join(map(repr, self.list()))})"