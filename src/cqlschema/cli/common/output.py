"""Output formatting utilities for the CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from cqlschema.core.catalog import CatalogLayout
from cqlschema.core.multimap import ListMultimap
from cqlschema.core.schema_rows import DroppedRow, RowCategory, SchemaRows

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

_MAX_ROW_PREVIEW_WIDTH = 72


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _row_preview(row: Any) -> str:
    """Render a row as `col=value, ...` when it exposes its data, else repr."""
    data = getattr(row, "data", None)
    if isinstance(data, Mapping):
        text = ", ".join(f"{k}={v}" for k, v in data.items())
    else:
        text = repr(row)
    return escape(_truncate(text, _MAX_ROW_PREVIEW_WIDTH))


def _keyspace_label(row: Any) -> str:
    """Render the keyspace name of a row as-is, whatever its type."""
    data = getattr(row, "data", None)
    if isinstance(data, Mapping):
        value = data.get("keyspace_name")
    else:
        value = row.get_string("keyspace_name")
    return escape(str(value)) if value is not None else ""


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def keyspaces_table(self, rows: Iterable[Any], title: str = "Keyspaces") -> None:
        """
        Expects rows exposing `data` or `get_string` (like cqlschema.core.rows.AdminRow).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Keyspace", style="ok", no_wrap=True)
        t.add_column("Row", style="meta")

        for row in rows:
            t.add_row(_keyspace_label(row), _row_preview(row))

        console.print(t)

    def categories_table(self, rows: SchemaRows, title: str = "Classified rows") -> None:
        """Render accepted row counts and keyspace counts per category."""
        t = Table(title=title, show_lines=False)
        t.add_column("Category", style="ok", no_wrap=True)
        t.add_column("Keyspaces", justify="right")
        t.add_column("Rows", justify="right")

        for category in RowCategory:
            if category is RowCategory.KEYSPACES:
                keys = len(rows.keyspaces)
            elif category in (RowCategory.COLUMNS, RowCategory.INDEXES):
                keys = len(rows.by_table(category))
            else:
                keys = len(rows.by_keyspace(category))
            t.add_row(category.value, str(keys), str(rows.row_count(category)))

        console.print(t)

    def buckets_table(self, buckets: ListMultimap, title: str) -> None:
        """Render a keyspace -> rows multimap as one line per keyspace."""
        t = Table(title=title, show_lines=False)
        t.add_column("Keyspace", style="ok", no_wrap=True)
        t.add_column("Rows", justify="right")

        for keyspace, values in buckets.items():
            t.add_row(escape(str(keyspace)), str(len(values)))

        console.print(t)

    def nested_buckets_table(
        self, buckets: Mapping[Any, ListMultimap], title: str
    ) -> None:
        """Render a keyspace -> table -> rows mapping as one line per table."""
        t = Table(title=title, show_lines=False)
        t.add_column("Keyspace", style="ok", no_wrap=True)
        t.add_column("Table", style="ok", no_wrap=True)
        t.add_column("Rows", justify="right")

        for keyspace, tables in buckets.items():
            for table, values in tables.items():
                t.add_row(escape(str(keyspace)), escape(str(table)), str(len(values)))

        console.print(t)

    def dropped_table(
        self, dropped: Iterable[DroppedRow], title: str = "Dropped rows"
    ) -> None:
        """Render rows that were skipped during classification."""
        t = Table(title=title, show_lines=False)
        t.add_column("Category", style="warn", no_wrap=True)
        t.add_column("Reason")
        t.add_column("Row", style="meta")

        for d in dropped:
            t.add_row(d.category.value, d.reason.value, _row_preview(d.row))

        console.print(t)

    def layouts_table(
        self, layouts: Iterable[CatalogLayout], title: str = "Catalog layouts"
    ) -> None:
        """Render the catalog tables of each known layout."""
        t = Table(title=title, show_lines=True)
        t.add_column("Layout", style="ok", no_wrap=True)
        t.add_column("Table column", style="meta")
        t.add_column("Catalog tables")

        for layout in layouts:
            tables = "\n".join(
                f"{category.value}: {name}"
                for category, name in layout.catalog_tables.items()
            )
            t.add_row(layout.name, layout.table_name_column, tables)

        console.print(t)


out = Out()
