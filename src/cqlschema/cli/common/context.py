"""Application context management for the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.logging import RichHandler

from cqlschema.cli.common.exits import EXIT_USAGE, die, exit_from_exc
from cqlschema.cli.common.output import console
from cqlschema.core.dump import CatalogDump, DumpFormatError, load_dump
from cqlschema.core.refresh import SchemaChangeScope, SchemaRefreshRequest
from cqlschema.core.schema_rows import SchemaRowsBuilder

_LOG_FORMAT = "%(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Route library logging through Rich at the requested level."""
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        die(f"Invalid log level: '{level}'", code=EXIT_USAGE)
    pkg_logger = logging.getLogger("cqlschema")
    pkg_logger.setLevel(resolved)
    for handler in list(pkg_logger.handlers):
        if isinstance(handler, RichHandler):
            pkg_logger.removeHandler(handler)
    handler = RichHandler(console=console, show_path=False)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    pkg_logger.addHandler(handler)


@dataclass
class InspectContext:
    """Everything needed to classify one catalog dump."""

    dump_path: Path
    dump: CatalogDump
    request: SchemaRefreshRequest
    table_name_column: str

    def new_builder(self) -> SchemaRowsBuilder:
        return SchemaRowsBuilder(
            node=self.dump.node,
            request=self.request,
            table_name_column=self.table_name_column,
            log_prefix=self.dump_path.name,
        )


def build_request(
    scope: str, keyspace: str | None, object_name: str | None
) -> SchemaRefreshRequest:
    """Build a refresh request from CLI options, exiting on invalid input."""
    try:
        resolved = SchemaChangeScope(scope.strip().upper())
    except ValueError as exc:
        exit_from_exc(exc, message=f"Unknown scope: '{scope}'", code=EXIT_USAGE)
    if resolved != SchemaChangeScope.FULL_SCHEMA and not keyspace:
        die(f"--keyspace is required for a {resolved.value} refresh", code=EXIT_USAGE)
    return SchemaRefreshRequest(scope=resolved, keyspace=keyspace, object_name=object_name)


def build_inspect_context(
    dump_path: Path,
    *,
    scope: str,
    keyspace: str | None,
    object_name: str | None,
    table_column: str | None,
) -> InspectContext:
    """Load the dump and resolve the request for the `inspect` command."""
    request = build_request(scope, keyspace, object_name)
    try:
        dump = load_dump(dump_path)
    except DumpFormatError as exc:
        exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)
    return InspectContext(
        dump_path=dump_path,
        dump=dump,
        request=request,
        table_name_column=table_column or dump.table_name_column,
    )
