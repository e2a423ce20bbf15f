"""Supported languages and their syntax-tree vocabularies."""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

import tree_sitter_go
import tree_sitter_javascript
import tree_sitter_python
import tree_sitter_rust
import tree_sitter_typescript
from tree_sitter import Language, Parser

from entityscope.schemas.graph import EntityKind


class DetectedLanguage(str, Enum):
    """Languages the engine can analyze, in tie-break priority order."""

    GO = "Go"
    RUST = "Rust"
    PYTHON = "Python"
    JAVASCRIPT = "JavaScript"

    @property
    def spec(self) -> "LanguageSpec":
        return LANGUAGE_SPECS[self]

    @property
    def extensions(self) -> tuple[str, ...]:
        return self.spec.extensions


@dataclass(frozen=True)
class LanguageSpec:
    """Node-kind vocabulary used by extraction and reference resolution."""

    extensions: tuple[str, ...]
    declarations: dict[str, EntityKind] = field(default_factory=dict)
    call_kinds: frozenset[str] = frozenset({"call_expression"})
    # node kind -> (qualifier field, name field)
    qualified_kinds: dict[str, tuple[str, str]] = field(default_factory=dict)
    identifier_kinds: frozenset[str] = frozenset({"identifier", "type_identifier"})
    separators: tuple[str, ...] = (".",)


COMMENT_KINDS = frozenset({"comment", "line_comment", "block_comment"})

LANGUAGE_SPECS: dict[DetectedLanguage, LanguageSpec] = {
    # Go declarations are handled by the package-aware extractor.
    DetectedLanguage.GO: LanguageSpec(
        extensions=("go",),
        qualified_kinds={
            "selector_expression": ("operand", "field"),
            "qualified_type": ("package", "name"),
        },
    ),
    DetectedLanguage.RUST: LanguageSpec(
        extensions=("rs",),
        declarations={
            "function_item": EntityKind.FUNCTION,
            "struct_item": EntityKind.STRUCT,
            "enum_item": EntityKind.ENUM,
            "trait_item": EntityKind.TRAIT,
            "type_item": EntityKind.TYPE_ALIAS,
            "const_item": EntityKind.CONSTANT,
            "static_item": EntityKind.VARIABLE,
            "mod_item": EntityKind.MODULE,
        },
        qualified_kinds={
            "field_expression": ("value", "field"),
            "scoped_identifier": ("path", "name"),
            "scoped_type_identifier": ("path", "name"),
        },
        separators=("::", "."),
    ),
    DetectedLanguage.PYTHON: LanguageSpec(
        extensions=("py",),
        declarations={
            "function_definition": EntityKind.FUNCTION,
            "class_definition": EntityKind.CLASS,
        },
        call_kinds=frozenset({"call"}),
        qualified_kinds={"attribute": ("object", "attribute")},
    ),
    DetectedLanguage.JAVASCRIPT: LanguageSpec(
        extensions=("js", "jsx", "ts", "tsx"),
        declarations={
            "function_declaration": EntityKind.FUNCTION,
            "generator_function_declaration": EntityKind.FUNCTION,
            "class_declaration": EntityKind.CLASS,
            "abstract_class_declaration": EntityKind.CLASS,
            "method_definition": EntityKind.METHOD,
            "lexical_declaration": EntityKind.VARIABLE,
            "variable_declaration": EntityKind.VARIABLE,
            "interface_declaration": EntityKind.INTERFACE,
            "type_alias_declaration": EntityKind.TYPE_ALIAS,
            "enum_declaration": EntityKind.ENUM,
        },
        qualified_kinds={"member_expression": ("object", "property")},
    ),
}

if set(LANGUAGE_SPECS) != set(DetectedLanguage):
    raise RuntimeError("LANGUAGE_SPECS must cover every DetectedLanguage")


@lru_cache(maxsize=None)
def grammar_for_extension(extension: str) -> Language:
    """Tree-sitter grammar for a file extension (without the dot)."""
    if extension == "go":
        return Language(tree_sitter_go.language())
    if extension == "rs":
        return Language(tree_sitter_rust.language())
    if extension == "py":
        return Language(tree_sitter_python.language())
    if extension in ("js", "jsx"):
        return Language(tree_sitter_javascript.language())
    if extension == "ts":
        return Language(tree_sitter_typescript.language_typescript())
    if extension == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    raise ValueError(f"No grammar for extension: {extension}")


def make_parser(extension: str) -> Parser:
    """New parser for one file; parsers are not shared between threads."""
    return Parser(grammar_for_extension(extension))
