"""Schema refresh requests and scope adjustment.

A refresh request describes what changed on the server. Targeted requests
for a single table may really concern a materialized view: both are notified
with the TABLE scope, and the difference is only known once the catalog rows
have been classified. ``adjust_request`` resolves that ambiguity.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class SchemaChangeScope(str, Enum):
    """
    Granularity targeted by a schema refresh.

    Values:
        FULL_SCHEMA: Every keyspace is refreshed.
        KEYSPACE: A single keyspace and everything it contains.
        TABLE: A single table (or a view notified as a table).
        VIEW: A single materialized view.
        TYPE: A single user-defined type.
        FUNCTION: A single user-defined function.
        AGGREGATE: A single user-defined aggregate.
    """

    FULL_SCHEMA = "FULL_SCHEMA"
    KEYSPACE = "KEYSPACE"
    TABLE = "TABLE"
    VIEW = "VIEW"
    TYPE = "TYPE"
    FUNCTION = "FUNCTION"
    AGGREGATE = "AGGREGATE"


class SchemaRowsError(RuntimeError):
    """Base class for errors raised while gathering schema rows."""


class InvariantViolation(SchemaRowsError):
    """Raised when a TABLE refresh does not classify exactly one table or view."""

    def __init__(self, tables: int, views: int) -> None:
        super().__init__(
            "Processing TABLE or VIEW refresh, expected exactly one row but "
            f"found {tables} table(s) and {views} view(s)"
        )
        self.tables = tables
        self.views = views


@dataclass(frozen=True)
class SchemaRefreshRequest:
    """
    Immutable description of a schema refresh.

    Attributes:
        scope: What kind of element is refreshed.
        keyspace: Target keyspace, None for a full schema refresh.
        object_name: Target element inside the keyspace, if any.
        arguments: Argument types for functions and aggregates.
    """

    scope: SchemaChangeScope = SchemaChangeScope.FULL_SCHEMA
    keyspace: str | None = None
    object_name: str | None = None
    arguments: tuple[str, ...] = ()

    def with_scope(self, scope: SchemaChangeScope) -> SchemaRefreshRequest:
        """Return a copy of this request with a different scope."""
        return replace(self, scope=scope)

    @property
    def is_full(self) -> bool:
        return self.scope == SchemaChangeScope.FULL_SCHEMA

    def describe(self) -> str:
        """Short human-readable label, e.g. ``TABLE ks1.t1``."""
        parts = [part for part in (self.keyspace, self.object_name) if part]
        target = ".".join(parts)
        if self.arguments:
            target = f"{target}({', '.join(self.arguments)})"
        return f"{self.scope.value} {target}".strip()


def adjust_request(
    table_count: int,
    view_count: int,
    request: SchemaRefreshRequest,
) -> SchemaRefreshRequest:
    """
    Resolve the effective request once table and view rows are classified.

    Only TABLE-scoped requests are checked. They must match exactly one row
    across tables and views; if that row is a view, the request is rewritten
    to the VIEW scope. Other scopes are returned unchanged.

    Raises:
        InvariantViolation: If a TABLE request matched zero or several rows.
    """
    if request.scope != SchemaChangeScope.TABLE:
        return request
    if table_count + view_count != 1:
        raise InvariantViolation(table_count, view_count)
    if table_count == 0:
        return request.with_scope(SchemaChangeScope.VIEW)
    return request
