"""Row abstraction for system catalog query results.

Rows are produced by the query layer and only read here. The classification
logic depends on the ``Row`` protocol alone; ``AdminRow`` is a simple
mapping-backed implementation used by dump loading and tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Protocol


class Row(Protocol):
    """Interface for a catalog row with named-column access."""

    def get_string(self, column: str) -> str | None:
        """Return the column value as a string, or None if absent/null."""
        ...


@dataclass(frozen=True, eq=False)
class AdminRow:
    """
    Read-only catalog row backed by a column -> value mapping.

    Rows compare by identity: two rows with the same values returned by two
    queries are still two distinct rows.
    """

    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    def contains(self, column: str) -> bool:
        """Return True if the row has a non-null value for column."""
        return self.data.get(column) is not None

    def get_string(self, column: str) -> str | None:
        """Return the column value as a string, or None if absent/null."""
        return self._get(column, str)

    def get_int(self, column: str) -> int | None:
        """Return the column value as an int, or None if absent/null."""
        value = self.data.get(column)
        if isinstance(value, bool):
            raise TypeError(f"Column '{column}' is not an int: {value!r}")
        return self._get(column, int)

    def get_boolean(self, column: str) -> bool | None:
        """Return the column value as a bool, or None if absent/null."""
        return self._get(column, bool)

    def _get(self, column: str, kind: type) -> Any:
        value = self.data.get(column)
        if value is None:
            return None
        if not isinstance(value, kind):
            raise TypeError(
                f"Column '{column}' is not a {kind.__name__}: {value!r}"
            )
        return value

    def __repr__(self) -> str:
        return f"AdminRow({dict(self.data)!r})"
