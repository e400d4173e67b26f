import json

import pytest
from typer.testing import CliRunner

from cqlschema.cli.cli import app
from cqlschema.cli.common.context import build_request
from cqlschema.core.refresh import SchemaChangeScope

runner = CliRunner()


def _write_dump(tmp_path, rows: dict, **extra) -> str:
    path = tmp_path / "dump.json"
    payload = {"node": "10.0.0.1:9042", "release_version": "3.11.4", "rows": rows}
    payload.update(extra)
    path.write_text(json.dumps(payload))
    return str(path)


def test_inspect_classifies_dump(tmp_path):
    dump = _write_dump(
        tmp_path,
        {
            "keyspaces": [{"keyspace_name": "ks1"}],
            "tables": [{"keyspace_name": "ks1", "table_name": "t1"}],
            "columns": [{"keyspace_name": "ks1", "table_name": "t1", "column_name": "c"}],
        },
    )

    result = runner.invoke(app, ["inspect", dump, "--details"])

    assert result.exit_code == 0, result.output
    assert "10.0.0.1:9042" in result.output
    assert "All 3 row(s) classified" in result.output


def test_inspect_reports_dropped_rows(tmp_path):
    dump = _write_dump(tmp_path, {"tables": [{"table_name": "orphan"}]})

    result = runner.invoke(app, ["inspect", dump])

    assert result.exit_code == 0, result.output
    assert "1 row(s) skipped" in result.output


def test_inspect_adjusts_table_request_to_view(tmp_path):
    dump = _write_dump(tmp_path, {"views": [{"keyspace_name": "ks1", "view_name": "v1"}]})

    result = runner.invoke(
        app, ["inspect", dump, "--scope", "table", "-k", "ks1", "-o", "v1"]
    )

    assert result.exit_code == 0, result.output
    assert "TABLE -> VIEW" in result.output


def test_inspect_fails_on_ambiguous_table_refresh(tmp_path):
    dump = _write_dump(
        tmp_path,
        {
            "tables": [
                {"keyspace_name": "ks1", "table_name": "t1"},
                {"keyspace_name": "ks1", "table_name": "t2"},
            ]
        },
    )

    result = runner.invoke(app, ["inspect", dump, "--scope", "TABLE", "-k", "ks1"])

    assert result.exit_code == 1
    assert "expected exactly one row" in result.output


def test_inspect_rejects_unreadable_dump(tmp_path):
    result = runner.invoke(app, ["inspect", str(tmp_path / "missing.json")])

    assert result.exit_code == 2


def test_inspect_rejects_non_string_names(tmp_path):
    dump = _write_dump(tmp_path, {"tables": [{"keyspace_name": 42}]})

    result = runner.invoke(app, ["inspect", dump])

    assert result.exit_code == 2
    assert "Malformed dump rows" in result.output


def test_inspect_rejects_invalid_log_level(tmp_path):
    dump = _write_dump(tmp_path, {})

    result = runner.invoke(app, ["inspect", dump, "--log-level", "LOUD"])

    assert result.exit_code == 2


def test_layouts_lists_both_layouts():
    result = runner.invoke(app, ["layouts"])

    assert result.exit_code == 0
    assert "legacy" in result.output
    assert "system_schema" in result.output


def test_build_request_normalizes_scope():
    request = build_request("view", "ks1", "v1")

    assert request.scope is SchemaChangeScope.VIEW
    assert request.keyspace == "ks1"


@pytest.mark.parametrize("scope, keyspace", [("bogus", "ks1"), ("keyspace", None)])
def test_build_request_rejects_invalid_options(scope, keyspace):
    import typer

    with pytest.raises(typer.Exit) as exc_info:
        build_request(scope, keyspace, None)

    assert exc_info.value.exit_code == 2


def test_inspect_renders_non_string_keyspace_rows(tmp_path):
    dump = _write_dump(tmp_path, {"keyspaces": [{"keyspace_name": 5}]})

    result = runner.invoke(app, ["inspect", dump])

    assert result.exit_code == 0, result.output
    assert "All 1 row(s) classified" in result.output


def test_inspect_prints_bracketed_names_verbatim(tmp_path):
    dump = _write_dump(
        tmp_path,
        {
            "keyspaces": [{"keyspace_name": "[/x]"}],
            "tables": [{"keyspace_name": "[/x]", "table_name": "t"}],
            "columns": [{"keyspace_name": "[bold]", "table_name": "[/t]"}],
        },
        node="[red]node[/red]",
    )

    result = runner.invoke(app, ["inspect", dump, "--details"])

    assert result.exit_code == 0, result.output
    assert "[/x]" in result.output
    assert "[/t]" in result.output
    assert "[red]node[/red]" in result.output


def test_inspect_rejects_non_utf8_dump(tmp_path):
    path = tmp_path / "dump.json"
    path.write_bytes(b'{"rows": {"\xff": []}}')

    result = runner.invoke(app, ["inspect", str(path)])

    assert result.exit_code == 2


def test_exit_from_exc_chains_cause_and_uses_usage_code():
    import typer

    from cqlschema.cli.common.exits import EXIT_USAGE, die, exit_from_exc

    cause = ValueError("bad [input]")
    with pytest.raises(typer.Exit) as exc_info:
        exit_from_exc(cause, message=str(cause), code=EXIT_USAGE)

    assert exc_info.value.exit_code == 2
    assert exc_info.value.__cause__ is cause

    with pytest.raises(typer.Exit) as exc_info:
        die("[/oops]")

    assert exc_info.value.exit_code == 1
