"""Entity extraction from syntax trees."""

import logging
from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import Optional

from tree_sitter import Node

from entityscope.analysis.languages import COMMENT_KINDS, DetectedLanguage
from entityscope.analysis.parsing import ParsedFile, end_line, first_line, start_line
from entityscope.schemas.graph import Entity, EntityKind, make_entity_id

logger = logging.getLogger(__name__)


def doc_comment(parsed: ParsedFile, node: Node) -> str:
    """Contiguous comment siblings immediately preceding a node, in source order."""
    comments = []
    sibling = node.prev_sibling
    while sibling is not None and sibling.type in COMMENT_KINDS:
        comments.append(parsed.text(sibling))
        sibling = sibling.prev_sibling
    comments.reverse()
    return "\n".join(comments)


class EntityExtractor(ABC):
    """Base extractor: turns one parsed file into Entity records."""

    def __init__(self, language: DetectedLanguage):
        self.language = language

    @abstractmethod
    def extract(self, parsed: ParsedFile) -> list[Entity]:
        """Entities declared in one parsed file, in source order."""

    def _entity(
        self,
        parsed: ParsedFile,
        name: str,
        kind: EntityKind,
        span: Node,
        package: str,
        doc_node: Optional[Node] = None,
        signature: Optional[str] = None,
    ) -> Entity:
        source = parsed.text(span)
        return Entity(
            id=make_entity_id(parsed.rel_path, name, kind),
            name=name,
            kind=kind,
            file=parsed.rel_path,
            line=start_line(span),
            end_line=end_line(span),
            source=source,
            signature=first_line(source) if signature is None else signature,
            package=package,
            doc_comment=doc_comment(parsed, span if doc_node is None else doc_node),
        )


class GoEntityExtractor(EntityExtractor):
    """Top-level declarations of a Go file, with package and receiver semantics."""

    def __init__(self):
        super().__init__(DetectedLanguage.GO)

    @staticmethod
    def package_name(parsed: ParsedFile) -> str:
        """Declared package of the file ("main" when absent)."""
        for child in parsed.tree.root_node.children:
            if child.type == "package_clause":
                for inner in child.children:
                    if inner.type == "package_identifier":
                        return parsed.text(inner)
        return "main"

    def extract(self, parsed: ParsedFile) -> list[Entity]:
        package = self.package_name(parsed)
        entities: list[Entity] = []

        for child in parsed.tree.root_node.children:
            if child.type == "function_declaration":
                name_node = child.child_by_field_name("name")
                if name_node is not None:
                    entities.append(
                        self._entity(parsed, parsed.text(name_node), EntityKind.FUNCTION, child, package)
                    )
            elif child.type == "method_declaration":
                entity = self._method(parsed, child, package)
                if entity is not None:
                    entities.append(entity)
            elif child.type == "type_declaration":
                entities.extend(self._types(parsed, child, package))
            elif child.type in ("const_declaration", "var_declaration"):
                entities.extend(self._values(parsed, child, package))

        return entities

    def _method(self, parsed: ParsedFile, node: Node, package: str) -> Optional[Entity]:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = parsed.text(name_node)
        receiver = node.child_by_field_name("receiver")
        # Literal receiver clause, e.g. "(s *Server).Start"
        if receiver is not None and parsed.text(receiver):
            name = f"{parsed.text(receiver)}.{name}"
        return self._entity(parsed, name, EntityKind.METHOD, node, package)

    def _types(self, parsed: ParsedFile, node: Node, package: str) -> list[Entity]:
        entities = []
        for spec in node.children:
            if spec.type not in ("type_spec", "type_alias"):
                continue
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            name = parsed.text(name_node)
            type_node = spec.child_by_field_name("type")
            if spec.type == "type_spec" and type_node is not None and type_node.type == "struct_type":
                kind = EntityKind.STRUCT
            elif spec.type == "type_spec" and type_node is not None and type_node.type == "interface_type":
                kind = EntityKind.INTERFACE
            else:
                kind = EntityKind.TYPE_ALIAS
            entities.append(
                self._entity(parsed, name, kind, node, package, signature=f"type {name} ...")
            )
        return entities

    def _values(self, parsed: ParsedFile, node: Node, package: str) -> list[Entity]:
        kind = EntityKind.CONSTANT if node.type == "const_declaration" else EntityKind.VARIABLE
        entities = []
        specs = []
        for child in node.children:
            if child.type in ("const_spec", "var_spec"):
                specs.append(child)
            elif child.type in ("const_spec_list", "var_spec_list"):
                specs.extend(c for c in child.children if c.type in ("const_spec", "var_spec"))
        for spec in specs:
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            entities.append(
                self._entity(parsed, parsed.text(name_node), kind, spec, package, doc_node=node)
            )
        return entities


class GenericEntityExtractor(EntityExtractor):
    """Table-driven extractor: every declaration node anywhere in the tree."""

    def extract(self, parsed: ParsedFile) -> list[Entity]:
        declarations = self.language.spec.declarations
        package = PurePosixPath(parsed.rel_path).parent.name
        entities: list[Entity] = []

        stack = [parsed.tree.root_node]
        while stack:
            node = stack.pop()
            kind = declarations.get(node.type)
            if kind is not None:
                name = self._declared_name(parsed, node)
                if name:
                    entities.append(self._entity(parsed, name, kind, node, package))
            stack.extend(reversed(node.children))

        return entities

    @staticmethod
    def _declared_name(parsed: ParsedFile, node: Node) -> Optional[str]:
        name_node = node.child_by_field_name("name")
        if name_node is None and node.type in ("lexical_declaration", "variable_declaration"):
            for child in node.named_children:
                if child.type == "variable_declarator":
                    declarator_name = child.child_by_field_name("name")
                    if declarator_name is not None and declarator_name.type == "identifier":
                        name_node = declarator_name
                    break
        if name_node is None:
            return None
        return parsed.text(name_node) or None


def extractor_for(language: DetectedLanguage) -> EntityExtractor:
    if language == DetectedLanguage.GO:
        return GoEntityExtractor()
    return GenericEntityExtractor(language)
