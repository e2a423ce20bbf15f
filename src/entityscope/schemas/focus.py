"""Schemas for query results over an entity graph."""

from pydantic import BaseModel, Field

from entityscope.schemas.graph import Entity


class SearchResult(BaseModel):
    """An entity matched by a search query."""

    entity: Entity
    score: float = Field(description="Match score: 1.0 exact name down to 0.2 signature")


class IncomingRef(BaseModel):
    """An entity that calls or references the focus center."""

    entity: Entity
    relation: str = Field(description="Human label, e.g. 'called by'")


class SameDirEntry(BaseModel):
    """Compact outgoing reference into the center's own directory."""

    id: str
    kind: str = Field(description="Kind label")
    signature: str


class DirGroup(BaseModel):
    """Aggregated outgoing references into another directory."""

    pkg_name: str = Field(description="Last segment of the directory path")
    pkg_dir: str = Field(description="Repo-relative directory path")
    fn_count: int = Field(default=0, description="Function/method targets")
    type_count: int = Field(default=0, description="Targets of any other kind")

    @property
    def total(self) -> int:
        return self.fn_count + self.type_count


class FocusView(BaseModel):
    """Tiered neighborhood of one entity."""

    center: Entity
    incoming: list[IncomingRef] = Field(default_factory=list)
    same_pkg: list[SameDirEntry] = Field(default_factory=list)
    same_module: list[DirGroup] = Field(default_factory=list)
    external_deps: list[str] = Field(default_factory=list)


class GraphNode(BaseModel):
    id: str
    name: str
    kind: str
    package: str
    file: str
    line: int


class GraphEdge(BaseModel):
    source: str
    target: str
    kind: str


class GraphData(BaseModel):
    """Node/edge projection of the whole graph for visualization."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
