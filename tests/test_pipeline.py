"""Integration tests for the repository parsing pipeline."""

import pytest

from entityscope.analysis.pipeline import RepoParser
from entityscope.core.errors import NoSupportedLanguageError
from entityscope.schemas.graph import EntityKind, RelationKind


class TestGoScenario:
    """Test the two-package Go module end to end."""

    def test_entities_and_single_call(self, go_demo_repo):
        info, graph = RepoParser().parse(go_demo_repo)

        assert [(e.name, e.kind) for e in graph.entities] == [
            ("Foo", EntityKind.FUNCTION),
            ("Bar", EntityKind.FUNCTION),
        ]
        foo_id = "a/a.go::function::Foo"
        bar_id = "b/b.go::function::Bar"
        assert [(r.from_id, r.to_id, r.kind) for r in graph.relations] == [
            (bar_id, foo_id, RelationKind.CALLS)
        ]
        assert not any(r.from_id == foo_id for r in graph.relations)

    def test_repo_info(self, go_demo_repo):
        info, _ = RepoParser().parse(go_demo_repo)

        assert info.language == "Go"
        assert info.name == "demo"
        assert info.total_files == 2
        assert info.total_entities == 2
        assert info.packages == ["a", "b"]
        assert info.module_name == "example.com/demo"
        assert info.approximate is True
        labels = [a.label for a in info.attributes]
        assert labels == ["Module", "Packages", "go.mod"]
        assert info.attributes[0].value == "example.com/demo"
        assert info.attributes[2].link.endswith("go.mod")

    def test_relations_have_no_self_loops(self, go_demo_repo):
        _, graph = RepoParser().parse(go_demo_repo)
        assert all(r.from_id != r.to_id for r in graph.relations)


class TestPartialFailures:
    """Test that bad files are skipped instead of failing the whole run."""

    def test_invalid_utf8_file_is_skipped(self, make_repo):
        root = make_repo(
            {
                "a/a.go": "package a\n\nfunc A() {}\n",
                "a/bad.go": b"package a\n\nfunc \xff\xfe() {}\n",
                "b/b.go": "package b\n\nfunc B() {}\n",
            }
        )
        info, graph = RepoParser().parse(root)

        assert info.total_files == 2
        assert sorted(e.name for e in graph.entities) == ["A", "B"]

    def test_syntax_errors_still_extract(self, make_repo):
        root = make_repo(
            {
                "main.go": "package main\n\nfunc Good() {}\n\nfunc Broken( {\n",
            }
        )
        info, graph = RepoParser().parse(root)

        assert info.total_files == 1
        assert "Good" in [e.name for e in graph.entities]


class TestGenericRepos:
    """Test summaries for table-driven languages."""

    def test_python_repo_info(self, make_repo):
        root = make_repo(
            {
                "pkg/app.py": "def main():\n    pass\n",
                "pkg/util.py": "class Util:\n    pass\n",
                "tools/cli.py": "def run():\n    pass\n",
            },
            name="pyproj",
        )
        info, graph = RepoParser().parse(root)

        assert info.language == "Python"
        assert info.total_files == 3
        assert info.packages == ["pkg", "tools"]
        assert info.module_name == "pyproj"
        assert [(a.label, a.value) for a in info.attributes] == [
            ("Language", "Python"),
            ("Files", "3"),
            ("Packages", "2"),
        ]
        assert graph.external_deps == {}


class TestLanguageErrors:
    """Test terminal errors for unsupported repositories."""

    def test_no_supported_language(self, make_repo):
        root = make_repo({"README.md": "# nothing here\n"})
        with pytest.raises(NoSupportedLanguageError, match="No supported language files found"):
            RepoParser().parse(root)

    def test_only_excluded_sources(self, make_repo):
        """Test the distinct message when every candidate file is excluded."""
        root = make_repo({"vendor/dep/dep.go": "package dep\n"})
        with pytest.raises(NoSupportedLanguageError, match="no collectable source files"):
            RepoParser().parse(root)
