"""Import alias resolution to repo-relative directories."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tree_sitter import Node

from entityscope.analysis.languages import DetectedLanguage
from entityscope.analysis.parsing import ParsedFile

logger = logging.getLogger(__name__)

MODULE_MANIFEST = "go.mod"


@dataclass
class FileImports:
    """Per-file import map, discarded after the file's reference pass."""

    # alias -> repo-relative directory
    dirs: dict[str, str] = field(default_factory=dict)
    # alias -> full import path, for imports outside the module root
    external: dict[str, str] = field(default_factory=dict)


def read_module_root(repo_path: Path) -> str:
    """Module path declared in go.mod, else the repository folder name."""
    manifest = repo_path / MODULE_MANIFEST
    if manifest.is_file():
        try:
            for line in manifest.read_text(encoding="utf-8").splitlines():
                if line.startswith("module "):
                    return line[len("module "):].strip().strip('"')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Cannot read {manifest}: {e}")
    return repo_path.name or "unknown"


def _import_specs(declaration: Node) -> list[Node]:
    specs = []
    for child in declaration.children:
        if child.type == "import_spec":
            specs.append(child)
        elif child.type == "import_spec_list":
            specs.extend(c for c in child.children if c.type == "import_spec")
    return specs


def parse_go_imports(parsed: ParsedFile) -> dict[str, str]:
    """
    Map each import alias of a Go file to its full import path.

    The alias defaults to the last path segment. Dot and blank imports are
    skipped.
    """
    imports: dict[str, str] = {}
    for child in parsed.tree.root_node.children:
        if child.type != "import_declaration":
            continue
        for spec in _import_specs(child):
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            import_path = parsed.text(path_node).strip('"`')
            name_node = spec.child_by_field_name("name")
            if name_node is not None:
                alias = parsed.text(name_node)
                if alias in (".", "_"):
                    continue
            else:
                alias = import_path.rsplit("/", 1)[-1]
            imports[alias] = import_path
    return imports


def strip_module_root(import_path: str, module_root: str) -> Optional[str]:
    """Repo-relative directory of an import path, or None when it is external."""
    if import_path == module_root:
        return "."
    prefix = module_root.rstrip("/") + "/"
    if import_path.startswith(prefix):
        return import_path[len(prefix):].strip("/") or "."
    return None


class ImportResolver:
    """Builds per-file import maps; a no-op for languages without module imports."""

    def __init__(self, language: DetectedLanguage, module_root: str = ""):
        self.language = language
        self.module_root = module_root

    def resolve(self, parsed: ParsedFile) -> FileImports:
        if self.language != DetectedLanguage.GO:
            return FileImports()

        imports = FileImports()
        for alias, import_path in parse_go_imports(parsed).items():
            directory = strip_module_root(import_path, self.module_root)
            if directory is None:
                imports.external[alias] = import_path
            else:
                imports.dirs[alias] = directory
        return imports
