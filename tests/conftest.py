"""Shared fixtures: small repositories materialized under tmp_path."""

import textwrap
from pathlib import Path
from typing import Union

import pytest

from entityscope.analysis.parsing import ParsedFile, parse_source_file
from entityscope.schemas.graph import (
    Entity,
    EntityGraph,
    EntityKind,
    Relation,
    RelationKind,
    make_entity_id,
)


@pytest.fixture
def make_repo(tmp_path):
    """Factory writing {relative path: content} into a fresh repository directory."""

    def _make(files: dict[str, Union[str, bytes]], name: str = "repo") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return root

    return _make


@pytest.fixture
def parse_snippet(make_repo):
    """Parse one source string as the given repo-relative file."""

    def _parse(rel_path: str, content: str) -> ParsedFile:
        root = make_repo({rel_path: content}, name="snippet")
        return parse_source_file(root / rel_path, root)

    return _parse


GO_DEMO = {
    "go.mod": """
        module example.com/demo

        go 1.21
    """,
    "a/a.go": """
        package a

        func Foo() {}
    """,
    "b/b.go": """
        package b

        import (
            "fmt"

            "example.com/demo/a"
        )

        func Bar() {
            a.Foo()
            fmt.Println("done")
        }
    """,
}


@pytest.fixture
def go_demo_repo(make_repo):
    """Two-package Go module where b.Bar calls a.Foo through an import."""
    return make_repo(GO_DEMO, name="demo")


def make_entity(
    file: str,
    name: str,
    kind: EntityKind = EntityKind.FUNCTION,
    package: str = "",
    signature: str = "",
    line: int = 1,
) -> Entity:
    """Hand-built entity for graph-level tests."""
    return Entity(
        id=make_entity_id(file, name, kind),
        name=name,
        kind=kind,
        file=file,
        line=line,
        end_line=line,
        source=signature,
        signature=signature,
        package=package,
    )


def make_graph(entities: list[Entity], edges: list[tuple[Entity, Entity]] = (), **kwargs) -> EntityGraph:
    relations = [
        Relation(from_id=src.id, to_id=dst.id, kind=RelationKind.CALLS) for src, dst in edges
    ]
    return EntityGraph(entities=entities, relations=relations, **kwargs)
