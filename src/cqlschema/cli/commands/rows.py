"""Commands for classifying system catalog rows."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.markup import escape

from cqlschema.cli.common.context import (
    InspectContext,
    build_inspect_context,
    configure_logging,
)
from cqlschema.cli.common.exits import EXIT_FAILED, EXIT_USAGE, exit_from_exc
from cqlschema.cli.common.options import (
    DetailsOpt,
    KeyspaceOpt,
    LogLevelOpt,
    ObjectOpt,
    ScopeOpt,
    TableColumnOpt,
)
from cqlschema.cli.common.output import out
from cqlschema.core.catalog import LAYOUTS, feed_rows
from cqlschema.core.refresh import InvariantViolation
from cqlschema.core.schema_rows import RowCategory, SchemaRows


def inspect(
    dump: Path = typer.Argument(..., help="JSON catalog dump to classify"),
    scope: str = ScopeOpt,
    keyspace: str | None = KeyspaceOpt,
    object_name: str | None = ObjectOpt,
    table_column: str | None = TableColumnOpt,
    log_level: str = LogLevelOpt,
    details: bool = DetailsOpt,
):
    """
    Classify the rows of a catalog dump and show the resulting buckets.
    """
    configure_logging(log_level)
    appctx: InspectContext = build_inspect_context(
        dump,
        scope=scope,
        keyspace=keyspace,
        object_name=object_name,
        table_column=table_column,
    )

    builder = appctx.new_builder()
    try:
        feed_rows(builder, appctx.dump.rows)
        rows = builder.build()
    except InvariantViolation as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_FAILED)
    except (TypeError, ValueError) as exc:
        exit_from_exc(exc, message=f"Malformed dump rows: {exc}", code=EXIT_USAGE)

    _render(appctx, rows, details=details)


def _render(appctx: InspectContext, rows: SchemaRows, *, details: bool) -> None:
    out.header(f"Schema rows from {escape(str(rows.node))}")
    out.kv(
        {
            "Dump": appctx.dump_path,
            "Release": appctx.dump.release_version or "unknown",
            "Table column": rows.table_name_column,
            "Request": rows.request.describe(),
        }
    )
    if rows.request != appctx.request:
        out.info(
            f"Request adjusted: {appctx.request.scope.value} -> {rows.request.scope.value}"
        )

    if rows.keyspaces:
        out.keyspaces_table(rows.keyspaces)
    out.categories_table(rows)

    if details:
        for category in (
            RowCategory.TABLES,
            RowCategory.VIEWS,
            RowCategory.TYPES,
            RowCategory.FUNCTIONS,
            RowCategory.AGGREGATES,
        ):
            buckets = rows.by_keyspace(category)
            if buckets:
                out.buckets_table(buckets, title=category.value.capitalize())
        for category in (RowCategory.COLUMNS, RowCategory.INDEXES):
            nested = rows.by_table(category)
            if nested:
                out.nested_buckets_table(nested, title=category.value.capitalize())

    if rows.dropped:
        out.dropped_table(rows.dropped)
        out.warn(f"{len(rows.dropped)} row(s) skipped")
    else:
        out.success(f"All {appctx.dump.row_total()} row(s) classified")


def layouts():
    """
    List the known system catalog layouts.
    """
    out.layouts_table(LAYOUTS)
