import json

import pytest

from cqlschema.core.dump import DumpFormatError, load_dump, parse_dump


def test_parse_dump_defaults_table_column_from_release_version():
    dump = parse_dump(
        {
            "node": "10.0.0.1:9042",
            "release_version": "2.1.22",
            "rows": {"tables": [{"keyspace_name": "ks1", "columnfamily_name": "t1"}]},
        }
    )

    assert dump.node == "10.0.0.1:9042"
    assert dump.table_name_column == "columnfamily_name"
    assert dump.rows["tables"][0].get_string("columnfamily_name") == "t1"
    assert dump.row_total() == 1


def test_parse_dump_keeps_explicit_table_column():
    dump = parse_dump({"table_name_column": "custom", "rows": {}})

    assert dump.table_name_column == "custom"
    assert dump.node == "unknown"
    assert dump.release_version is None


@pytest.mark.parametrize(
    "payload, message",
    [
        ([], "JSON object"),
        ({"rows": []}, "rows"),
        ({"rows": {"peers": []}}, "Unknown catalog row kind"),
        ({"rows": {"tables": {"a": 1}}}, "list of objects"),
        ({"release_version": "x", "rows": {}}, "release version"),
    ],
)
def test_parse_dump_rejects_malformed_documents(payload, message):
    with pytest.raises(DumpFormatError, match=message):
        parse_dump(payload)


def test_load_dump_reads_file(tmp_path):
    path = tmp_path / "dump.json"
    path.write_text(json.dumps({"release_version": "4.0.1", "rows": {"keyspaces": [{}]}}))

    dump = load_dump(path)

    assert dump.table_name_column == "table_name"
    assert len(dump.rows["keyspaces"]) == 1


def test_load_dump_wraps_io_and_json_errors(tmp_path):
    with pytest.raises(DumpFormatError, match="Cannot read"):
        load_dump(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(DumpFormatError, match="Invalid JSON"):
        load_dump(bad)


def test_load_dump_rejects_non_utf8_bytes(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"rows": {"\xff": []}}')

    with pytest.raises(DumpFormatError, match="not UTF-8"):
        load_dump(path)
