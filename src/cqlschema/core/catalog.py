"""System catalog layouts and routing of catalog rows.

The catalog tables that describe the schema, and the column that holds a
table's name, depend on the server release. This module knows both layouts
and routes rows fetched from each catalog table to the matching builder
operation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from cqlschema.core.rows import Row
from cqlschema.core.schema_rows import RowCategory, SchemaRowsBuilder

LEGACY_TABLE_NAME_COLUMN = "columnfamily_name"
TABLE_NAME_COLUMN = "table_name"

_VERSION_RE = re.compile(r"^\s*(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True)
class CatalogLayout:
    """
    Names of the system catalog tables for a family of server releases.

    Attributes:
        name: Short label for the layout.
        table_name_column: Column holding table names in column/index rows.
        catalog_tables: Catalog table queried for each row category.
            Categories missing here do not exist in the layout.
    """

    name: str
    table_name_column: str
    catalog_tables: Mapping[RowCategory, str]

    def supports(self, category: RowCategory) -> bool:
        return category in self.catalog_tables


LEGACY_LAYOUT = CatalogLayout(
    name="legacy",
    table_name_column=LEGACY_TABLE_NAME_COLUMN,
    catalog_tables={
        RowCategory.KEYSPACES: "system.schema_keyspaces",
        RowCategory.TABLES: "system.schema_columnfamilies",
        RowCategory.COLUMNS: "system.schema_columns",
        RowCategory.TYPES: "system.schema_usertypes",
        RowCategory.FUNCTIONS: "system.schema_functions",
        RowCategory.AGGREGATES: "system.schema_aggregates",
    },
)

MODERN_LAYOUT = CatalogLayout(
    name="system_schema",
    table_name_column=TABLE_NAME_COLUMN,
    catalog_tables={
        RowCategory.KEYSPACES: "system_schema.keyspaces",
        RowCategory.TABLES: "system_schema.tables",
        RowCategory.VIEWS: "system_schema.views",
        RowCategory.COLUMNS: "system_schema.columns",
        RowCategory.INDEXES: "system_schema.indexes",
        RowCategory.TYPES: "system_schema.types",
        RowCategory.FUNCTIONS: "system_schema.functions",
        RowCategory.AGGREGATES: "system_schema.aggregates",
    },
)

LAYOUTS = (LEGACY_LAYOUT, MODERN_LAYOUT)


def parse_release_version(release_version: str) -> tuple[int, int, int]:
    """Parse `major.minor[.patch][-suffix]` into (major, minor, patch)."""
    match = _VERSION_RE.match(release_version or "")
    if not match:
        raise ValueError(f"Unrecognized release version: '{release_version}'")
    major, minor, patch = match.groups()
    return int(major), int(minor), int(patch or 0)


def layout_for_version(release_version: str) -> CatalogLayout:
    """Return the catalog layout used by a server release (3.0 moved to system_schema)."""
    if parse_release_version(release_version) < (3, 0, 0):
        return LEGACY_LAYOUT
    return MODERN_LAYOUT


def category_for_kind(kind: str) -> RowCategory:
    """Map a kind name (e.g. `tables`) or a catalog table name to its category."""
    key = kind.strip().lower()
    try:
        return RowCategory(key)
    except ValueError:
        pass
    for layout in LAYOUTS:
        for category, table in layout.catalog_tables.items():
            if table == key:
                return category
    raise ValueError(f"Unknown catalog row kind: '{kind}'")


def feed_rows(
    builder: SchemaRowsBuilder,
    rows_by_kind: Mapping[str, Iterable[Row]],
) -> SchemaRowsBuilder:
    """
    Feed batches keyed by kind name into a builder.

    Keys can be category names (`tables`, `columns`...) or catalog table
    names (`system_schema.tables`). Batches are fed in mapping order.

    Raises:
        ValueError: If a key does not name a known category or catalog table.
    """
    resolved = [(category_for_kind(kind), rows) for kind, rows in rows_by_kind.items()]
    for category, rows in resolved:
        builder.with_rows(category, rows)
    return builder
