"""Tests for the command-line interface."""

import json

import pytest
import yaml
from click.testing import CliRunner

from entityscope.cli.main import main


@pytest.fixture
def runner():
    return CliRunner()


def invoke(runner, *args):
    return runner.invoke(main, ["--log-level", "ERROR", *args])


class TestQueryCommands:
    """Test the repository query commands."""

    def test_info_text(self, runner, go_demo_repo):
        result = invoke(runner, "info", str(go_demo_repo))
        assert result.exit_code == 0, result.output
        assert "example.com/demo" in result.stdout
        assert "Module" in result.stdout

    def test_info_json(self, runner, go_demo_repo):
        result = invoke(runner, "--format", "json", "info", str(go_demo_repo))
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["language"] == "Go"
        assert data["total_entities"] == 2
        assert data["approximate"] is True

    def test_search_json(self, runner, go_demo_repo):
        result = invoke(runner, "--format", "json", "search", str(go_demo_repo), "Foo")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data[0]["entity"]["id"] == "a/a.go::function::Foo"
        assert data[0]["score"] == 1.0

    def test_search_limit(self, runner, go_demo_repo):
        result = invoke(runner, "--format", "json", "search", str(go_demo_repo), "function", "--limit", "1")
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)) == 1

    def test_search_text(self, runner, go_demo_repo):
        result = invoke(runner, "search", str(go_demo_repo), "Bar")
        assert result.exit_code == 0, result.output
        assert "Bar" in result.stdout

    def test_focus_json(self, runner, go_demo_repo):
        result = invoke(runner, "--format", "json", "focus", str(go_demo_repo), "b/b.go::function::Bar")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["center"]["name"] == "Bar"
        assert data["same_module"] == [
            {"pkg_name": "a", "pkg_dir": "a", "fn_count": 1, "type_count": 0}
        ]
        assert data["external_deps"] == ["fmt"]

    def test_focus_text(self, runner, go_demo_repo):
        result = invoke(runner, "focus", str(go_demo_repo), "a/a.go::function::Foo")
        assert result.exit_code == 0, result.output
        assert "called by" in result.stdout

    def test_entities_kind_filter(self, runner, make_repo):
        root = make_repo({"main.go": "package main\n\ntype T struct{}\n\nfunc F() {}\n"})
        result = invoke(runner, "--format", "json", "entities", str(root), "--kind", "struct")
        assert result.exit_code == 0, result.output
        assert [e["name"] for e in json.loads(result.stdout)] == ["T"]

    def test_source(self, runner, go_demo_repo):
        result = invoke(runner, "source", str(go_demo_repo), "a/a.go::function::Foo")
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "func Foo() {}"

    def test_graph_json(self, runner, go_demo_repo):
        result = invoke(runner, "--format", "json", "graph", str(go_demo_repo))
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert len(data["nodes"]) == 2
        assert data["edges"] == [
            {"source": "b/b.go::function::Bar", "target": "a/a.go::function::Foo", "kind": "Calls"}
        ]


class TestErrors:
    """Test that input errors exit with a message instead of a traceback."""

    def test_missing_repo(self, runner, tmp_path):
        result = invoke(runner, "info", str(tmp_path / "missing"))
        assert result.exit_code == 1
        assert "Error: Path does not exist" in result.output

    def test_unknown_entity(self, runner, go_demo_repo):
        result = invoke(runner, "source", str(go_demo_repo), "nope")
        assert result.exit_code == 1
        assert "Error: Entity not found: nope" in result.output

    def test_unsupported_repo(self, runner, make_repo):
        root = make_repo({"README.md": "hi"})
        result = invoke(runner, "info", str(root))
        assert result.exit_code == 1
        assert "No supported language files found" in result.output


class TestConfigCommands:
    """Test config export/import."""

    def test_export_json(self, runner):
        result = invoke(runner, "--workers", "3", "config", "export", "--format", "json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["max_workers"] == 3
        assert data["log_level"] == "ERROR"

    def test_export_to_file(self, runner, tmp_path):
        out = tmp_path / "exported.yaml"
        result = invoke(runner, "config", "export", "-o", str(out))
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(out.read_text())["search_limit"] == 50

    def test_import(self, runner, tmp_path):
        source = tmp_path / "in.yaml"
        source.write_text("search_limit: 12\n")
        target = tmp_path / "home" / "config.yaml"
        result = invoke(runner, "config", "import", str(source), "--target", str(target))
        assert result.exit_code == 0, result.output
        assert yaml.safe_load(target.read_text())["search_limit"] == 12

    def test_undecodable_project_config_is_ignored(self, runner, tmp_path):
        with runner.isolated_filesystem(temp_dir=tmp_path):
            with open(".entityscope.yaml", "wb") as f:
                f.write(b"search_limit: \xff\xfe\n")
            result = invoke(runner, "config", "export", "--format", "json")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["search_limit"] == 50
