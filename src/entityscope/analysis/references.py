"""
Cross-reference resolution over syntax trees.

Relations are inferred lexically: a directory stands in for a package, and a
qualifier is resolved either through the file's import aliases or as a local
value whose members live in the caller's own directory. Results are
approximate and may both under- and over-match.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Optional

from tree_sitter import Node

from entityscope.analysis.imports import FileImports
from entityscope.analysis.languages import DetectedLanguage
from entityscope.analysis.parsing import ParsedFile, find_node_spanning
from entityscope.schemas.graph import Entity, EntityKind, Relation, RelationKind, file_dir

logger = logging.getLogger(__name__)


@dataclass
class NameIndex:
    """Global lookup tables built once all files have been extracted."""

    by_name: dict[str, list[str]] = field(default_factory=dict)
    # bare method name -> ids of receiver-qualified methods
    by_method: dict[str, list[str]] = field(default_factory=dict)
    # entity id -> containing directory
    entity_dirs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, entities: list[Entity], normalize_receivers: bool = True) -> "NameIndex":
        by_name: dict[str, list[str]] = defaultdict(list)
        by_method: dict[str, list[str]] = defaultdict(list)
        entity_dirs: dict[str, str] = {}
        for entity in entities:
            by_name[entity.name].append(entity.id)
            entity_dirs[entity.id] = file_dir(entity.file)
            if normalize_receivers and entity.kind == EntityKind.METHOD and ")." in entity.name:
                by_method[entity.name.rsplit(".", 1)[1]].append(entity.id)
        return cls(by_name=dict(by_name), by_method=dict(by_method), entity_dirs=entity_dirs)

    def candidates(self, name: str, qualified: bool) -> list[str]:
        ids = self.by_name.get(name, [])
        if qualified and name in self.by_method:
            ids = ids + self.by_method[name]
        return ids


@dataclass
class FileReferences:
    relations: list[Relation] = field(default_factory=list)
    external_deps: dict[str, list[str]] = field(default_factory=dict)


def split_qualified(text: str, separators: tuple[str, ...]) -> Optional[tuple[str, str]]:
    """Split callee text at its last separator into (qualifier, simple name)."""
    best = -1
    best_sep = ""
    for sep in separators:
        index = text.rfind(sep)
        if index > best:
            best, best_sep = index, sep
    if best < 0:
        return None
    return text[:best], text[best + len(best_sep):]


class _EntityWalk:
    """Reference walk for one entity's subtree."""

    def __init__(
        self,
        resolver: "ReferenceResolver",
        parsed: ParsedFile,
        imports: FileImports,
        caller_dir: str,
        from_id: str,
        seen: set[tuple[str, str]],
        out: FileReferences,
    ):
        self.resolver = resolver
        self.spec = resolver.language.spec
        self.parsed = parsed
        self.imports = imports
        self.caller_dir = caller_dir
        self.from_id = from_id
        self.seen = seen
        self.out = out

    def add(self, to_id: str, kind: RelationKind) -> None:
        if to_id == self.from_id:
            return
        key = (self.from_id, to_id)
        if key in self.seen:
            return
        self.seen.add(key)
        self.out.relations.append(Relation(from_id=self.from_id, to_id=to_id, kind=kind))

    def match(self, name: str, expected_dir: str, kind: RelationKind, qualified: bool = False) -> None:
        index = self.resolver.index
        for target_id in index.candidates(name, qualified):
            if index.entity_dirs.get(target_id) == expected_dir:
                self.add(target_id, kind)

    def note_external(self, qualifier: str) -> None:
        import_path = self.imports.external.get(qualifier)
        if import_path is None:
            return
        deps = self.out.external_deps.setdefault(self.from_id, [])
        if import_path not in deps:
            deps.append(import_path)

    def qualified(self, qualifier: str, name: str, kind: RelationKind) -> None:
        target_dir = self.imports.dirs.get(qualifier)
        if target_dir is not None:
            self.match(name, target_dir, kind, qualified=True)
        else:
            # Not an in-repo import: a local value whose members live alongside the caller.
            self.note_external(qualifier)
            self.match(name, self.caller_dir, kind, qualified=True)

    def run(self, root: Node) -> None:
        spec = self.spec
        stack = [root]
        while stack:
            node = stack.pop()

            if node.type in spec.call_kinds:
                callee = node.child_by_field_name("function")
                if callee is not None:
                    text = self.parsed.text(callee)
                    parts = split_qualified(text, spec.separators)
                    if parts is not None:
                        self.qualified(parts[0], parts[1], RelationKind.CALLS)
                    else:
                        self.match(text, self.caller_dir, RelationKind.CALLS)
                callee_id = callee.id if callee is not None else None
                stack.extend(
                    child
                    for child in reversed(node.children)
                    if child.id != callee_id and child.type not in spec.qualified_kinds
                )
                continue

            fields = spec.qualified_kinds.get(node.type)
            if fields is not None:
                qualifier_node = node.child_by_field_name(fields[0])
                if qualifier_node is None:
                    qualifier_node = node.child(0)
                name_node = node.child_by_field_name(fields[1])
                if qualifier_node is not None and name_node is not None:
                    self.qualified(
                        self.parsed.text(qualifier_node),
                        self.parsed.text(name_node),
                        RelationKind.REFERENCES,
                    )
                continue

            if node.type in spec.identifier_kinds:
                self.match(self.parsed.text(node), self.caller_dir, RelationKind.REFERENCES)

            stack.extend(reversed(node.children))


class ReferenceResolver:
    """Second pass: turns identifier occurrences into Calls/References edges."""

    def __init__(self, language: DetectedLanguage, index: NameIndex):
        self.language = language
        self.index = index

    def resolve_file(
        self,
        parsed: ParsedFile,
        file_entities: list[Entity],
        imports: FileImports,
    ) -> FileReferences:
        """
        Resolve outgoing references of every entity declared in one file.

        Entities whose span cannot be re-located in the tree contribute no
        references.
        """
        out = FileReferences()
        seen: set[tuple[str, str]] = set()
        caller_dir = file_dir(parsed.rel_path)
        root = parsed.tree.root_node

        for entity in file_entities:
            node = find_node_spanning(root, entity.line, entity.end_line)
            if node is None:
                logger.debug(f"No node spans {entity.id} ({entity.line}-{entity.end_line})")
                continue
            walk = _EntityWalk(self, parsed, imports, caller_dir, entity.id, seen, out)
            walk.run(node)

        return out
