import pytest

from cqlschema.core.rows import AdminRow


def test_get_string_returns_none_for_missing_or_null():
    row = AdminRow({"keyspace_name": "ks1", "comment": None})

    assert row.get_string("keyspace_name") == "ks1"
    assert row.get_string("comment") is None
    assert row.get_string("table_name") is None
    assert row.contains("keyspace_name") is True
    assert row.contains("comment") is False


def test_typed_accessors_reject_wrong_types():
    row = AdminRow({"durable_writes": True, "gc_grace_seconds": 864000})

    assert row.get_boolean("durable_writes") is True
    assert row.get_int("gc_grace_seconds") == 864000
    with pytest.raises(TypeError):
        row.get_string("gc_grace_seconds")
    with pytest.raises(TypeError):
        row.get_int("durable_writes")


def test_rows_are_read_only_and_compare_by_identity():
    source = {"keyspace_name": "ks1"}
    row = AdminRow(source)
    source["keyspace_name"] = "changed"

    assert row.get_string("keyspace_name") == "ks1"
    assert row != AdminRow({"keyspace_name": "ks1"})
    with pytest.raises(TypeError):
        row.data["keyspace_name"] = "x"  # type: ignore[index]
