"""Tests for the codemap command-line interface."""

import pytest
from typer.testing import CliRunner

from codemap.core.exporter import graph_to_json, load_graph
from codemap.main import app

runner = CliRunner()


@pytest.fixture
def graph_file(tmp_path, demo_graph):
    path = tmp_path / "graph.json"
    path.write_text(graph_to_json(demo_graph), encoding="utf-8")
    return path


def test_validate_ok(graph_file):
    result = runner.invoke(app, ["validate", str(graph_file)])
    assert result.exit_code == 0
    assert "OK" in result.output


def test_validate_strict_reports_counts(graph_file):
    result = runner.invoke(app, ["validate", str(graph_file), "--strict"])
    assert result.exit_code == 0
    assert "7 functions, 6 calls" in result.output


def test_validate_unbalanced(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"nodes":[],"edges":[]}}', encoding="utf-8")

    result = runner.invoke(app, ["validate", str(path)])

    assert result.exit_code == 1
    assert "unmatched closer" in result.output


def test_validate_strict_catches_bad_field(tmp_path):
    """Test a structurally fine document with a wrong field type."""
    path = tmp_path / "bad.json"
    path.write_text('{"nodes":[{"name":1}],"edges":[]}', encoding="utf-8")

    assert runner.invoke(app, ["validate", str(path)]).exit_code == 0
    result = runner.invoke(app, ["validate", str(path), "--strict"])
    assert result.exit_code == 1
    assert "nodes.0.name" in result.output


def test_validate_missing_file(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_show_lists_functions(graph_file):
    result = runner.invoke(app, ["show", str(graph_file)])
    assert result.exit_code == 0
    assert "parseFile" in result.output
    assert "missing" in result.output
    assert "7 functions, 6 calls" in result.output


def test_show_filter(graph_file):
    result = runner.invoke(app, ["show", str(graph_file), "--filter", "parse"])
    assert result.exit_code == 0
    assert "3 functions, 2 calls" in result.output
    assert "buildGraph" not in result.output


def test_show_json(graph_file, demo_graph):
    result = runner.invoke(app, ["show", str(graph_file), "--json"])
    assert result.exit_code == 0
    assert result.output.strip() == graph_to_json(demo_graph)


def test_show_invalid_document(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops", encoding="utf-8")
    result = runner.invoke(app, ["show", str(path)])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_node_details(graph_file):
    result = runner.invoke(app, ["node", str(graph_file), "2"])
    assert result.exit_code == 0
    assert "buildGraph" in result.output
    assert "Callers: main" in result.output
    assert "Callees: exportJSON, missingFunc" in result.output


def test_node_out_of_range(graph_file):
    result = runner.invoke(app, ["node", str(graph_file), "42"])
    assert result.exit_code == 1


def test_stats(graph_file):
    result = runner.invoke(app, ["stats", str(graph_file)])
    assert result.exit_code == 0
    assert "Implemented" in result.output
    assert "Dangling edges" in result.output


def test_normalize_default_output(tmp_path, monkeypatch, demo_graph):
    source = tmp_path / "compact.json"
    source.write_text(
        '{"nodes":[{"name":"f","file":"f.c","line":2,"isStub":false,'
        '"isMissing":false,"isExternal":false}],"edges":[]}',
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["normalize", str(source)])

    assert result.exit_code == 0
    written = tmp_path / "codemap-graph.json"
    assert written.exists()
    assert '\n      "name": "f",\n' in written.read_text(encoding="utf-8")


def test_normalize_explicit_output(graph_file, tmp_path, demo_graph):
    target = tmp_path / "out.json"
    result = runner.invoke(app, ["normalize", str(graph_file), "-o", str(target)])
    assert result.exit_code == 0
    assert load_graph(target) == demo_graph


def test_normalize_unencodable_name(tmp_path):
    """Test a name decoding to a lone surrogate exits cleanly."""
    source = tmp_path / "surrogate.json"
    source.write_text(
        '{"nodes":[{"name":"\\ud800","file":"f.c","line":2,"isStub":false,'
        '"isMissing":false,"isExternal":false}],"edges":[]}',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["normalize", str(source), "-o", str(tmp_path / "out.json")])

    assert result.exit_code == 1
    assert "Cannot write" in result.output


def test_show_deeply_nested_document(tmp_path):
    path = tmp_path / "deep.json"
    path.write_text('{"nodes": ' + "[" * 100000 + "]" * 100000 + ', "edges": []}', encoding="utf-8")

    result = runner.invoke(app, ["show", str(path)])

    assert result.exit_code == 1
    assert "nested too deeply" in result.output


def test_invalid_log_level_setting(graph_file, monkeypatch):
    from codemap import config as config_module

    monkeypatch.setenv("CODEMAP_LOG_LEVEL", "chatty")
    config_module.get_settings.cache_clear()

    result = runner.invoke(app, ["stats", str(graph_file)])

    assert result.exit_code == 1
    assert "Error: invalid CODEMAP_* setting" in result.output
