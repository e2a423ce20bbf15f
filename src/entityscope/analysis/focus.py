"""Read-only projections over an assembled entity graph."""

from collections import defaultdict

from entityscope.core.errors import EntityNotFoundError
from entityscope.schemas.focus import (
    DirGroup,
    FocusView,
    GraphData,
    GraphEdge,
    GraphNode,
    IncomingRef,
    SameDirEntry,
)
from entityscope.schemas.graph import EntityGraph, Relation, file_dir


class FocusProjector:
    """Builds tiered neighborhood views of single entities."""

    def __init__(self, graph: EntityGraph):
        self.graph = graph
        self._outgoing: dict[str, list[Relation]] = defaultdict(list)
        self._incoming: dict[str, list[Relation]] = defaultdict(list)
        for relation in graph.relations:
            self._outgoing[relation.from_id].append(relation)
            self._incoming[relation.to_id].append(relation)

    def focus(self, entity_id: str) -> FocusView:
        """
        Neighborhood of one entity.

        Outgoing targets in the center's directory are listed individually;
        targets elsewhere are grouped per directory, largest group first.

        Raises:
            EntityNotFoundError: If the id is unknown
        """
        center = self.graph.get_entity(entity_id)
        if center is None:
            raise EntityNotFoundError(entity_id)
        center_dir = file_dir(center.file)

        incoming = []
        for relation in self._incoming.get(entity_id, []):
            source = self.graph.get_entity(relation.from_id)
            if source is not None:
                incoming.append(IncomingRef(entity=source, relation=relation.kind.incoming_label))

        same_pkg: list[SameDirEntry] = []
        groups: dict[str, DirGroup] = {}
        for relation in self._outgoing.get(entity_id, []):
            target = self.graph.get_entity(relation.to_id)
            if target is None:
                continue
            target_dir = file_dir(target.file)
            if target_dir == center_dir:
                same_pkg.append(
                    SameDirEntry(id=target.id, kind=target.kind.label, signature=target.signature)
                )
                continue
            group = groups.get(target_dir)
            if group is None:
                group = DirGroup(pkg_name=target_dir.rsplit("/", 1)[-1], pkg_dir=target_dir)
                groups[target_dir] = group
            if target.kind.is_callable:
                group.fn_count += 1
            else:
                group.type_count += 1

        same_module = sorted(groups.values(), key=lambda g: g.total, reverse=True)

        return FocusView(
            center=center,
            incoming=incoming,
            same_pkg=same_pkg,
            same_module=same_module,
            external_deps=list(self.graph.external_deps.get(entity_id, [])),
        )

    def graph_data(self) -> GraphData:
        """Node/edge projection of the whole graph."""
        nodes = [
            GraphNode(
                id=e.id,
                name=e.name,
                kind=e.kind.label,
                package=e.package,
                file=e.file,
                line=e.line,
            )
            for e in self.graph.entities
        ]
        edges = [
            GraphEdge(source=r.from_id, target=r.to_id, kind=r.kind.value)
            for r in self.graph.relations
            if self.graph.get_entity(r.from_id) is not None
            and self.graph.get_entity(r.to_id) is not None
        ]
        packages = sorted({e.package for e in self.graph.entities})
        return GraphData(nodes=nodes, edges=edges, packages=packages)
