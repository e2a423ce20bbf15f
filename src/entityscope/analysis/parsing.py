"""Reading source files and walking their syntax trees."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from tree_sitter import Node, Tree

from entityscope.analysis.languages import make_parser


@dataclass
class ParsedFile:
    """One source file with its syntax tree."""

    path: Path
    rel_path: str
    source: bytes
    tree: Tree

    def text(self, node: Node) -> str:
        return node_text(self.source, node)


def node_text(source: bytes, node: Node) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def start_line(node: Node) -> int:
    """1-based first line of a node."""
    return node.start_point[0] + 1


def end_line(node: Node) -> int:
    """1-based last line of a node (inclusive)."""
    return node.end_point[0] + 1


def first_line(text: str) -> str:
    lines = text.splitlines()
    return lines[0] if lines else ""


def relative_path(file_path: Path, repo_path: Path) -> str:
    """Repo-relative path with '/' separators."""
    try:
        return file_path.relative_to(repo_path).as_posix()
    except ValueError:
        return file_path.as_posix()


def parse_source_file(file_path: Path, repo_path: Path) -> ParsedFile:
    """
    Read and parse one file with the grammar matching its extension.

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
        ValueError: If no grammar exists for the extension or parsing aborts
    """
    source = file_path.read_bytes()
    source.decode("utf-8")
    parser = make_parser(file_path.suffix.lstrip(".").lower())
    tree = parser.parse(source)
    if tree is None:
        raise ValueError(f"Parser returned no tree for {file_path}")
    return ParsedFile(
        path=file_path,
        rel_path=relative_path(file_path, repo_path),
        source=source,
        tree=tree,
    )


def walk_preorder(node: Node) -> Iterator[Node]:
    """Yield a node and all its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_node_spanning(root: Node, line: int, last_line: int) -> Optional[Node]:
    """First node in pre-order whose 1-based line span is exactly [line, last_line]."""
    for node in walk_preorder(root):
        if start_line(node) == line and end_line(node) == last_line:
            return node
    return None
