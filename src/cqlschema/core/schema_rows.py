"""Gathering of system catalog rows for a schema refresh.

A SchemaRowsBuilder receives the rows returned by the catalog queries (one
batch per catalog table) and files them by keyspace, and by keyspace and
table for columns and indexes. ``build()`` freezes the result into an
immutable SchemaRows, resolving whether a TABLE refresh really targeted a
materialized view.

The builder is single-use and not thread-safe; the SchemaRows it produces
is never mutated and can be shared freely between readers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Hashable, Iterable, Mapping

from cqlschema.core.identifiers import Identifier
from cqlschema.core.multimap import ListMultimap, ListMultimapBuilder, build_nested
from cqlschema.core.refresh import SchemaRefreshRequest, SchemaRowsError, adjust_request
from cqlschema.core.rows import Row

logger = logging.getLogger(__name__)

KEYSPACE_NAME_COLUMN = "keyspace_name"

RowsByKeyspace = ListMultimap[Identifier, Row]
RowsByTable = Mapping[Identifier, ListMultimap[Identifier, Row]]


class RowCategory(str, Enum):
    """Catalog table a row was fed from."""

    KEYSPACES = "keyspaces"
    TABLES = "tables"
    VIEWS = "views"
    TYPES = "types"
    FUNCTIONS = "functions"
    AGGREGATES = "aggregates"
    COLUMNS = "columns"
    INDEXES = "indexes"


class DropReason(str, Enum):
    MISSING_KEYSPACE = "missing keyspace name"
    MISSING_TABLE = "missing table name"


@dataclass(frozen=True)
class DroppedRow:
    """A row that could not be classified and was left out of the result."""

    category: RowCategory
    reason: DropReason
    row: Row


class BuilderClosedError(SchemaRowsError):
    """Raised when a builder is used after ``build()``."""


@dataclass(frozen=True)
class SchemaRows:
    """
    Immutable result of a schema refresh's catalog queries.

    Attributes:
        node: The node the rows were read from.
        request: The effective refresh request. For a TABLE request whose
            only row turned out to be a view, the scope is VIEW.
        table_name_column: Catalog column holding table names for the
            server version; parsers read it again from individual rows.
        keyspaces: Keyspace rows, in feed order.
        tables: Table rows by keyspace.
        views: Materialized view rows by keyspace.
        types: User type rows by keyspace.
        functions: Function rows by keyspace.
        aggregates: Aggregate rows by keyspace.
        columns: Column rows by keyspace, then by table.
        indexes: Index rows by keyspace, then by table.
        dropped: Rows that were skipped, in feed order.
    """

    node: Any
    request: SchemaRefreshRequest
    table_name_column: str
    keyspaces: tuple[Row, ...] = ()
    tables: RowsByKeyspace = field(default_factory=ListMultimap)
    views: RowsByKeyspace = field(default_factory=ListMultimap)
    types: RowsByKeyspace = field(default_factory=ListMultimap)
    functions: RowsByKeyspace = field(default_factory=ListMultimap)
    aggregates: RowsByKeyspace = field(default_factory=ListMultimap)
    columns: RowsByTable = field(default_factory=lambda: MappingProxyType({}))
    indexes: RowsByTable = field(default_factory=lambda: MappingProxyType({}))
    dropped: tuple[DroppedRow, ...] = ()

    def by_keyspace(self, category: RowCategory) -> RowsByKeyspace:
        """Return the keyspace-level multimap for a one-level category."""
        if category not in _ONE_LEVEL:
            raise ValueError(f"'{category.value}' rows are not grouped by keyspace only")
        return getattr(self, category.value)

    def by_table(self, category: RowCategory) -> RowsByTable:
        """Return the keyspace -> table mapping for columns or indexes."""
        if category not in _TWO_LEVEL:
            raise ValueError(f"'{category.value}' rows are not grouped by table")
        return getattr(self, category.value)

    def row_count(self, category: RowCategory) -> int:
        """Return how many rows were accepted for a category."""
        if category is RowCategory.KEYSPACES:
            return len(self.keyspaces)
        if category in _ONE_LEVEL:
            return self.by_keyspace(category).size
        return sum(inner.size for inner in self.by_table(category).values())


_ONE_LEVEL = frozenset(
    {
        RowCategory.TABLES,
        RowCategory.VIEWS,
        RowCategory.TYPES,
        RowCategory.FUNCTIONS,
        RowCategory.AGGREGATES,
    }
)
_TWO_LEVEL = frozenset({RowCategory.COLUMNS, RowCategory.INDEXES})


class SchemaRowsBuilder:
    """
    Collects catalog rows and classifies them for a single refresh.

    Rows without a keyspace name (or, for columns and indexes, without a
    table name) are logged and dropped; the refresh goes on with the others.

    Batches are filed row by row. If a row raises while being read (for
    example a non-string name), the rows before it in the batch stay filed;
    discard the builder rather than retrying the batch.
    """

    def __init__(
        self,
        node: Any,
        request: SchemaRefreshRequest,
        table_name_column: str,
        log_prefix: str,
        *,
        normalize: Callable[[str], Hashable] = Identifier.from_internal,
        on_drop: Callable[[DroppedRow], None] | None = None,
    ) -> None:
        self.node = node
        self.request = request
        self.table_name_column = table_name_column
        self.log_prefix = log_prefix
        self._normalize = normalize
        self._on_drop = on_drop
        self._built = False

        self._keyspaces: list[Row] = []
        self._by_keyspace: dict[RowCategory, ListMultimapBuilder] = {
            category: ListMultimapBuilder() for category in _ONE_LEVEL
        }
        self._by_table: dict[RowCategory, dict[Hashable, ListMultimapBuilder]] = {
            category: {} for category in _TWO_LEVEL
        }
        self._dropped: list[DroppedRow] = []

    def with_keyspaces(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        self._check_open()
        self._keyspaces.extend(rows)
        return self

    def with_tables(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace(RowCategory.TABLES, rows)

    def with_views(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace(RowCategory.VIEWS, rows)

    def with_types(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace(RowCategory.TYPES, rows)

    def with_functions(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace(RowCategory.FUNCTIONS, rows)

    def with_aggregates(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace(RowCategory.AGGREGATES, rows)

    def with_columns(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace_and_table(RowCategory.COLUMNS, rows)

    def with_indexes(self, rows: Iterable[Row]) -> SchemaRowsBuilder:
        return self._put_by_keyspace_and_table(RowCategory.INDEXES, rows)

    def with_rows(self, category: RowCategory, rows: Iterable[Row]) -> SchemaRowsBuilder:
        """Feed a batch of rows for any category."""
        category = RowCategory(category)
        if category is RowCategory.KEYSPACES:
            return self.with_keyspaces(rows)
        if category in _TWO_LEVEL:
            return self._put_by_keyspace_and_table(category, rows)
        return self._put_by_keyspace(category, rows)

    def build(self) -> SchemaRows:
        """
        Freeze the collected rows into a SchemaRows.

        Single view notifications are issued with the TABLE scope; now that
        the rows are classified, the request is adjusted if the only row
        turned out to be a view.

        Raises:
            InvariantViolation: If the request has the TABLE scope and the
                rows do not contain exactly one table or view.
            BuilderClosedError: If ``build()`` was already called.
        """
        self._check_open()
        self._built = True

        frozen = {
            category: builder.build() for category, builder in self._by_keyspace.items()
        }
        tables = frozen[RowCategory.TABLES]
        views = frozen[RowCategory.VIEWS]
        request = adjust_request(tables.size, views.size, self.request)

        return SchemaRows(
            node=self.node,
            request=request,
            table_name_column=self.table_name_column,
            keyspaces=tuple(self._keyspaces),
            tables=tables,
            views=views,
            types=frozen[RowCategory.TYPES],
            functions=frozen[RowCategory.FUNCTIONS],
            aggregates=frozen[RowCategory.AGGREGATES],
            columns=build_nested(self._by_table[RowCategory.COLUMNS]),
            indexes=build_nested(self._by_table[RowCategory.INDEXES]),
            dropped=tuple(self._dropped),
        )

    def _put_by_keyspace(
        self, category: RowCategory, rows: Iterable[Row]
    ) -> SchemaRowsBuilder:
        self._check_open()
        builder = self._by_keyspace[category]
        for row in rows:
            keyspace = row.get_string(KEYSPACE_NAME_COLUMN)
            if keyspace is None:
                self._drop(category, DropReason.MISSING_KEYSPACE, row)
            else:
                builder.put(self._normalize(keyspace), row)
        return self

    def _put_by_keyspace_and_table(
        self, category: RowCategory, rows: Iterable[Row]
    ) -> SchemaRowsBuilder:
        self._check_open()
        builders = self._by_table[category]
        for row in rows:
            keyspace = row.get_string(KEYSPACE_NAME_COLUMN)
            table = row.get_string(self.table_name_column)
            if keyspace is None:
                self._drop(category, DropReason.MISSING_KEYSPACE, row)
            elif table is None:
                self._drop(category, DropReason.MISSING_TABLE, row)
            else:
                builder = builders.setdefault(
                    self._normalize(keyspace), ListMultimapBuilder()
                )
                builder.put(self._normalize(table), row)
        return self

    def _drop(self, category: RowCategory, reason: DropReason, row: Row) -> None:
        logger.warning(
            "[%s] Skipping system row from %s with %s",
            self.log_prefix,
            self.node,
            reason.value,
        )
        dropped = DroppedRow(category=category, reason=reason, row=row)
        self._dropped.append(dropped)
        if self._on_drop is not None:
            self._on_drop(dropped)

    def _check_open(self) -> None:
        if self._built:
            raise BuilderClosedError(
                f"[{self.log_prefix}] Schema rows were already built"
            )
