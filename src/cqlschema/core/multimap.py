"""Ordered multimap used to group schema rows by key.

A ListMultimapBuilder collects values under keys in insertion order and is
turned into an immutable ListMultimap exactly once. Keys keep the order in
which they were first seen; values keep the order in which they were added.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Generic, Hashable, Iterable, Iterator, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ListMultimap(Mapping[K, tuple[V, ...]], Generic[K, V]):
    """
    Immutable mapping from key to an ordered tuple of values.

    Behaves like a read-only ``Mapping``: ``len()`` is the number of keys and
    lookups return tuples. ``size`` is the total number of values, which is
    what callers usually mean by "how many rows".
    """

    __slots__ = ("_entries", "_size")

    def __init__(self, entries: Mapping[K, tuple[V, ...]] | None = None) -> None:
        frozen = {k: tuple(v) for k, v in (entries or {}).items() if v}
        self._entries: Mapping[K, tuple[V, ...]] = MappingProxyType(frozen)
        self._size = sum(len(v) for v in frozen.values())

    def __getitem__(self, key: K) -> tuple[V, ...]:
        return self._entries[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ListMultimap({dict(self._entries)!r})"

    @property
    def size(self) -> int:
        """Total number of values across all keys."""
        return self._size

    def get_all(self, key: K) -> tuple[V, ...]:
        """Return the values under key, or an empty tuple."""
        return self._entries.get(key, ())

    def entries(self) -> Iterator[tuple[K, V]]:
        """Yield (key, value) pairs in key order, then value order."""
        for key, values in self._entries.items():
            for value in values:
                yield key, value

    def values_flat(self) -> list[V]:
        """Return every value, grouped by key."""
        return [value for _, value in self.entries()]


class ListMultimapBuilder(Generic[K, V]):
    """Mutable, append-only collector that freezes into a ListMultimap."""

    def __init__(self) -> None:
        self._entries: dict[K, list[V]] = {}

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

    def put(self, key: K, value: V) -> ListMultimapBuilder[K, V]:
        """Append value under key."""
        self._entries.setdefault(key, []).append(value)
        return self

    def put_all(self, key: K, values: Iterable[V]) -> ListMultimapBuilder[K, V]:
        """Append every value under key, in iteration order."""
        for value in values:
            self.put(key, value)
        return self

    def build(self) -> ListMultimap[K, V]:
        """Return an immutable snapshot of the collected values."""
        return ListMultimap({k: tuple(v) for k, v in self._entries.items()})


def build_nested(
    builders: Mapping[K, ListMultimapBuilder[Hashable, V]],
) -> Mapping[K, ListMultimap[Hashable, V]]:
    """Freeze a mapping of builders one by one into a read-only mapping."""
    frozen = {}
    for key, builder in builders.items():
        multimap = builder.build()
        if multimap:
            frozen[key] = multimap
    return MappingProxyType(frozen)
