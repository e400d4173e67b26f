"""Common CLI options for the CLI."""

import typer

from cqlschema.core.refresh import SchemaChangeScope

ScopeOpt = typer.Option(
    SchemaChangeScope.FULL_SCHEMA.value,
    "--scope",
    "-s",
    help="Refresh scope: " + ", ".join(s.value for s in SchemaChangeScope),
    case_sensitive=False,
)

KeyspaceOpt = typer.Option(
    None,
    "--keyspace",
    "-k",
    help="Target keyspace of the refresh",
)

ObjectOpt = typer.Option(
    None,
    "--object",
    "-o",
    help="Target table/view/type/function/aggregate of the refresh",
)

TableColumnOpt = typer.Option(
    None,
    "--table-column",
    envvar="CQLSCHEMA_TABLE_COLUMN",
    help="Column holding table names (defaults to the dump's catalog layout)",
)

LogLevelOpt = typer.Option(
    "WARNING",
    "--log-level",
    envvar="CQLSCHEMA_LOG_LEVEL",
    help="Logging level (DEBUG, INFO, WARNING, ERROR)",
)

DetailsOpt = typer.Option(
    False,
    "--details",
    "-d",
    help="Show per-table column and index buckets",
)
