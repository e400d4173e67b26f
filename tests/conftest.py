from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from cqlschema.core.rows import AdminRow  # noqa: E402


@pytest.fixture
def row():
    """Factory for catalog rows: `row(keyspace_name="ks1", table_name="t1")`."""

    def _make(**columns) -> AdminRow:
        return AdminRow(columns)

    return _make
