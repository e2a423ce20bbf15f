"""Tests for the focus projection and graph-data export."""

import pytest

from conftest import make_entity, make_graph

from entityscope.analysis.focus import FocusProjector
from entityscope.core.errors import EntityNotFoundError
from entityscope.schemas.graph import EntityKind, Relation, RelationKind


@pytest.fixture
def tiered_graph():
    """Center in svc/ with two same-directory targets and three elsewhere."""
    center = make_entity("svc/svc.go", "Handle", package="svc")
    local_fn = make_entity("svc/util.go", "parse", package="svc", signature="func parse() {")
    local_type = make_entity("svc/types.go", "Request", EntityKind.STRUCT, package="svc")
    db_get = make_entity("internal/db/db.go", "Get", package="db")
    db_put = make_entity("internal/db/db.go", "Put", package="db")
    db_row = make_entity("internal/db/row.go", "Row", EntityKind.STRUCT, package="db")
    caller = make_entity("cmd/main.go", "main", package="main")

    graph = make_graph(
        [center, local_fn, local_type, db_get, db_put, db_row, caller],
        [
            (center, local_fn),
            (center, local_type),
            (center, db_get),
            (center, db_put),
            (center, db_row),
            (caller, center),
        ],
        external_deps={center.id: ["github.com/lib/pq"]},
    )
    return graph, center


class TestFocus:
    """Test tiered neighborhoods."""

    def test_tiering(self, tiered_graph):
        graph, center = tiered_graph
        view = FocusProjector(graph).focus(center.id)

        assert view.center == center
        assert [entry.id for entry in view.same_pkg] == [
            "svc/util.go::function::parse",
            "svc/types.go::struct::Request",
        ]
        assert view.same_pkg[0].kind == "function"
        assert view.same_pkg[0].signature == "func parse() {"

        assert len(view.same_module) == 1
        group = view.same_module[0]
        assert (group.pkg_name, group.pkg_dir) == ("db", "internal/db")
        assert (group.fn_count, group.type_count) == (2, 1)
        assert group.total == 3

    def test_incoming(self, tiered_graph):
        graph, center = tiered_graph
        view = FocusProjector(graph).focus(center.id)
        assert [(ref.entity.name, ref.relation) for ref in view.incoming] == [("main", "called by")]

    def test_external_deps(self, tiered_graph):
        graph, center = tiered_graph
        projector = FocusProjector(graph)
        assert projector.focus(center.id).external_deps == ["github.com/lib/pq"]
        assert projector.focus("cmd/main.go::function::main").external_deps == []

    def test_groups_sorted_by_total(self):
        center = make_entity("a/a.go", "A")
        small = make_entity("b/b.go", "B1")
        big = [make_entity("c/c.go", f"C{i}") for i in range(3)]
        graph = make_graph([center, small, *big], [(center, small)] + [(center, c) for c in big])

        view = FocusProjector(graph).focus(center.id)
        assert [g.pkg_dir for g in view.same_module] == ["c", "b"]

    def test_root_directory_counts_as_own_directory(self):
        center = make_entity("main.go", "main")
        helper = make_entity("util.go", "helper")
        graph = make_graph([center, helper], [(center, helper)])

        view = FocusProjector(graph).focus(center.id)
        assert [e.id for e in view.same_pkg] == [helper.id]
        assert view.same_module == []

    def test_reference_label(self):
        center = make_entity("a/a.go", "T", EntityKind.STRUCT)
        user = make_entity("a/b.go", "Use")
        graph = make_graph([center, user])
        graph.relations.append(Relation(from_id=user.id, to_id=center.id, kind=RelationKind.REFERENCES))

        view = FocusProjector(graph).focus(center.id)
        assert view.incoming[0].relation == "referenced by"

    def test_unknown_entity(self, tiered_graph):
        graph, _ = tiered_graph
        with pytest.raises(EntityNotFoundError, match="Entity not found: nope"):
            FocusProjector(graph).focus("nope")


class TestGraphData:
    """Test the node/edge projection."""

    def test_nodes_edges_packages(self, tiered_graph):
        graph, center = tiered_graph
        data = FocusProjector(graph).graph_data()

        assert len(data.nodes) == 7
        assert len(data.edges) == 6
        assert data.packages == ["db", "main", "svc"]
        node = next(n for n in data.nodes if n.id == center.id)
        assert (node.name, node.kind, node.file) == ("Handle", "function", "svc/svc.go")
        assert data.edges[0].kind == "Calls"

    def test_dangling_edges_omitted(self):
        a = make_entity("a.go", "A")
        graph = make_graph([a])
        graph.relations.append(Relation(from_id=a.id, to_id="gone", kind=RelationKind.CALLS))

        assert FocusProjector(graph).graph_data().edges == []
