"""Loading of catalog dumps saved as JSON.

A dump captures the rows returned by a node's catalog queries so that they
can be classified offline:

    {
      "node": "10.0.0.1:9042",
      "release_version": "3.11.4",
      "table_name_column": "table_name",
      "rows": {"keyspaces": [{...}], "tables": [{...}], ...}
    }

``table_name_column`` is optional and defaults to the one of the layout
matching ``release_version``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from cqlschema.core.catalog import MODERN_LAYOUT, category_for_kind, layout_for_version
from cqlschema.core.rows import AdminRow


class DumpFormatError(ValueError):
    """Raised when a catalog dump cannot be read or has an unexpected shape."""


@dataclass(frozen=True)
class CatalogDump:
    """Rows and metadata read from a catalog dump."""

    node: str
    release_version: str | None
    table_name_column: str
    rows: Mapping[str, tuple[AdminRow, ...]]

    def row_total(self) -> int:
        return sum(len(batch) for batch in self.rows.values())


def parse_dump(payload: Any) -> CatalogDump:
    """Validate a decoded JSON document and build a CatalogDump."""
    if not isinstance(payload, dict):
        raise DumpFormatError("Dump must be a JSON object.")

    raw_rows = payload.get("rows")
    if not isinstance(raw_rows, dict):
        raise DumpFormatError("Dump must have a `rows` object keyed by catalog kind.")

    release_version = payload.get("release_version")
    if release_version is not None:
        release_version = str(release_version)
    table_name_column = payload.get("table_name_column")
    if not table_name_column:
        try:
            layout = (
                layout_for_version(release_version) if release_version else MODERN_LAYOUT
            )
        except ValueError as exc:
            raise DumpFormatError(str(exc)) from exc
        table_name_column = layout.table_name_column

    rows: dict[str, tuple[AdminRow, ...]] = {}
    for kind, batch in raw_rows.items():
        try:
            category_for_kind(kind)
        except ValueError as exc:
            raise DumpFormatError(str(exc)) from exc
        if not isinstance(batch, list) or not all(isinstance(r, dict) for r in batch):
            raise DumpFormatError(f"Rows for `{kind}` must be a list of objects.")
        rows[kind] = tuple(AdminRow(r) for r in batch)

    return CatalogDump(
        node=str(payload.get("node") or "unknown"),
        release_version=release_version,
        table_name_column=str(table_name_column),
        rows=rows,
    )


def load_dump(path: Path) -> CatalogDump:
    """Read and parse a catalog dump file."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise DumpFormatError(f"Cannot read dump '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DumpFormatError(f"Invalid JSON in '{path}': {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DumpFormatError(f"Dump '{path}' is not UTF-8 text: {exc}") from exc
    return parse_dump(payload)
