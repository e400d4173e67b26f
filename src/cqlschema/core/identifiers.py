"""Identifiers used as classification keys.

Catalog rows store names in their internal form: the exact, case-sensitive
string. User-typed CQL follows different rules (unquoted names are
case-insensitive, quoted names are kept verbatim). Both are normalized into
an Identifier so that they can be compared and used as mapping keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_SIMPLE_NAME = re.compile(r"^[a-z][a-z0-9_]*$")

# Names that must be quoted even though they look like simple identifiers.
# fmt: off
RESERVED_KEYWORDS = frozenset(
    {
        "add", "allow", "alter", "and", "apply", "asc", "authorize", "batch",
        "begin", "by", "columnfamily", "create", "default", "delete", "desc",
        "describe", "drop", "entries", "execute", "from", "full", "grant",
        "if", "in", "index", "infinity", "insert", "into", "is", "keyspace",
        "limit", "materialized", "mbean", "mbeans", "modify", "nan",
        "norecursive", "not", "null", "of", "on", "or", "order", "primary",
        "rename", "replace", "revoke", "schema", "select", "set", "table",
        "to", "token", "truncate", "unlogged", "unset", "update", "use",
        "using", "view", "where", "with",
    }
)
# fmt: on


@dataclass(frozen=True)
class Identifier:
    """
    Normalized name of a schema element (keyspace, table, column...).

    Two identifiers are equal if and only if their internal forms are equal.

    Attributes:
        internal: The exact name as stored by the server.
    """

    internal: str

    @classmethod
    def from_internal(cls, name: str) -> Identifier:
        """Build an identifier from a name as stored in the system catalog."""
        return cls(name)

    @classmethod
    def from_cql(cls, text: str) -> Identifier:
        """
        Build an identifier from CQL source text.

        Unquoted names are case-insensitive and folded to lowercase. Names in
        double quotes keep their case, and an escaped quote (``""``) becomes a
        single ``"``.

        Raises:
            ValueError: If the text is empty or has unbalanced quotes.
        """
        if not text:
            raise ValueError("Identifier text must not be empty.")
        if text.startswith('"'):
            if len(text) < 2 or not text.endswith('"'):
                raise ValueError(f"Unbalanced quotes in identifier: {text}")
            return cls(text[1:-1].replace('""', '"'))
        if '"' in text:
            raise ValueError(f"Unexpected quote in identifier: {text}")
        return cls(text.lower())

    def as_internal(self) -> str:
        """Return the internal (exact) form."""
        return self.internal

    def as_cql(self, pretty: bool = False) -> str:
        """
        Render the identifier as CQL text.

        With ``pretty`` set, quotes are omitted when the name round-trips
        without them (lowercase simple name that is not a reserved keyword).
        """
        if pretty and _needs_no_quotes(self.internal):
            return self.internal
        return '"' + self.internal.replace('"', '""') + '"'

    def __str__(self) -> str:
        return self.as_cql(pretty=True)


def _needs_no_quotes(name: str) -> bool:
    return bool(_SIMPLE_NAME.match(name)) and name not in RESERVED_KEYWORDS
