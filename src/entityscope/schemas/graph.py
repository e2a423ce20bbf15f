"""Schemas for extracted entities, relations and repository summaries."""

from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, Field, PrivateAttr


class EntityKind(str, Enum):
    """Kind of a declared program element."""

    FUNCTION = "Function"
    METHOD = "Method"
    STRUCT = "Struct"
    INTERFACE = "Interface"
    TYPE_ALIAS = "TypeAlias"
    CONSTANT = "Constant"
    VARIABLE = "Variable"
    IMPORT = "Import"
    PACKAGE = "Package"
    CLASS = "Class"
    ENUM = "Enum"
    TRAIT = "Trait"
    MODULE = "Module"

    @property
    def label(self) -> str:
        """Short lowercase label used in ids and displays."""
        return _KIND_LABELS[self]

    @property
    def is_callable(self) -> bool:
        return self in (EntityKind.FUNCTION, EntityKind.METHOD)


_KIND_LABELS = {
    EntityKind.FUNCTION: "function",
    EntityKind.METHOD: "method",
    EntityKind.STRUCT: "struct",
    EntityKind.INTERFACE: "interface",
    EntityKind.TYPE_ALIAS: "type",
    EntityKind.CONSTANT: "const",
    EntityKind.VARIABLE: "var",
    EntityKind.IMPORT: "import",
    EntityKind.PACKAGE: "package",
    EntityKind.CLASS: "class",
    EntityKind.ENUM: "enum",
    EntityKind.TRAIT: "trait",
    EntityKind.MODULE: "module",
}


class RelationKind(str, Enum):
    """Kind of a directed edge between two entities.

    Only CALLS and REFERENCES are produced by the resolver; the rest are
    reserved for future producers.
    """

    CALLS = "Calls"
    CALLED_BY = "CalledBy"
    REFERENCES = "References"
    REFERENCED_BY = "ReferencedBy"
    CONTAINS = "Contains"
    CONTAINED_BY = "ContainedBy"
    IMPLEMENTS = "Implements"
    IMPLEMENTED_BY = "ImplementedBy"
    RETURNS = "Returns"
    ACCEPTS = "Accepts"

    @property
    def incoming_label(self) -> str:
        """Label for this edge seen from its target."""
        return _INCOMING_LABELS.get(self, "related to")


_INCOMING_LABELS = {
    RelationKind.CALLS: "called by",
    RelationKind.REFERENCES: "referenced by",
    RelationKind.CONTAINS: "contained in",
    RelationKind.IMPLEMENTS: "implemented by",
    RelationKind.RETURNS: "returned by",
    RelationKind.ACCEPTS: "accepted by",
}


def make_entity_id(file: str, name: str, kind: EntityKind) -> str:
    """Build an entity id from its file, kind label and display name."""
    return f"{file}::{kind.label}::{name}"


def file_dir(file: str) -> str:
    """Repo-relative directory of a repo-relative file path ("." for the root)."""
    parent = str(PurePosixPath(file).parent)
    return parent or "."


class Entity(BaseModel):
    """One declared program element."""

    id: str = Field(description="file::kind-label::name")
    name: str = Field(description="Display name (receiver-qualified for methods)")
    kind: EntityKind
    file: str = Field(description="Repo-relative path, '/' separated")
    line: int = Field(description="1-based first line of the spanning node")
    end_line: int = Field(description="1-based last line of the spanning node (inclusive)")
    source: str = Field(default="", description="Exact source text of the spanning node")
    signature: str = Field(default="", description="First source line or synthesized placeholder")
    package: str = Field(default="", description="Declared package or containing directory name")
    doc_comment: str = Field(default="", description="Contiguous comments preceding the node")

    @property
    def directory(self) -> str:
        return file_dir(self.file)


class Relation(BaseModel):
    """Directed typed edge from one entity id to another."""

    from_id: str
    to_id: str
    kind: RelationKind


class RepoAttribute(BaseModel):
    """Free-form attribute for display."""

    label: str
    value: str
    link: Optional[str] = None


class RepoInfo(BaseModel):
    """Derived summary of a loaded repository."""

    path: str
    name: str
    language: str
    total_files: int = 0
    total_entities: int = 0
    packages: list[str] = Field(default_factory=list, description="Sorted distinct package labels")
    module_name: str = ""
    attributes: list[RepoAttribute] = Field(default_factory=list)
    approximate: bool = Field(
        default=True,
        description="Relations are inferred from lexical heuristics, not semantic analysis",
    )


class EntityGraph(BaseModel):
    """All entities and relations of exactly one loaded repository."""

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    external_deps: dict[str, list[str]] = Field(
        default_factory=dict, description="entity id -> external import paths it uses"
    )

    _by_id: Optional[dict[str, Entity]] = PrivateAttr(default=None)

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        """Look up an entity by id (first occurrence wins on id collisions)."""
        if self._by_id is None:
            index: dict[str, Entity] = {}
            for entity in self.entities:
                index.setdefault(entity.id, entity)
            self._by_id = index
        return self._by_id.get(entity_id)
