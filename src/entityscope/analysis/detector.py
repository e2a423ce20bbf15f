"""Language detection and source file collection."""

import logging
import os
from collections import Counter
from pathlib import Path
from typing import Iterable, Optional

from entityscope.analysis.languages import DetectedLanguage

logger = logging.getLogger(__name__)

DEFAULT_DETECT_DEPTH = 5

# Directory names never collected (hidden directories are skipped too).
EXCLUDED_DIRS = frozenset({"vendor", "node_modules", "target", "testdata"})


def _extension(name: str) -> str:
    stem, dot, ext = name.rpartition(".")
    return ext if dot and stem else ""


def detect_language(repo_path: Path, max_depth: int = DEFAULT_DETECT_DEPTH) -> Optional[DetectedLanguage]:
    """
    Pick the dominant language of a repository by counting file extensions.

    Files deeper than ``max_depth`` levels below the root are not counted.
    Ties are broken by ``DetectedLanguage`` declaration order.

    Args:
        repo_path: Repository root
        max_depth: Maximum walk depth (the root's own files are at depth 1)

    Returns:
        The detected language, or None when no bucket has any file
    """
    by_extension = {
        ext: language for language in DetectedLanguage for ext in language.extensions
    }
    counts: Counter[DetectedLanguage] = Counter()

    root = str(repo_path)
    root_depth = root.rstrip(os.sep).count(os.sep)
    for dirpath, dirnames, filenames in os.walk(root):
        depth = dirpath.rstrip(os.sep).count(os.sep) - root_depth
        if depth + 1 >= max_depth:
            dirnames[:] = []
        if depth + 1 > max_depth:
            continue
        for filename in filenames:
            language = by_extension.get(_extension(filename))
            if language is not None:
                counts[language] += 1

    logger.debug(f"Extension counts for {repo_path}: {dict(counts)}")

    best = max(counts.values(), default=0)
    if best == 0:
        return None
    for language in DetectedLanguage:
        if counts[language] == best:
            return language
    return None


def _is_excluded(parts: Iterable[str], extra_excluded: frozenset[str]) -> bool:
    return any(
        part.startswith(".") or part in EXCLUDED_DIRS or part in extra_excluded
        for part in parts
    )


def collect_source_files(
    repo_path: Path,
    language: DetectedLanguage,
    extra_excluded: Iterable[str] = (),
) -> list[Path]:
    """
    List the source files of one language under a repository.

    Paths with a hidden segment or a denylisted directory (relative to the
    root) are skipped. Order follows the directory walk, with entries sorted
    by name at each level.

    Args:
        repo_path: Repository root
        language: Language whose extensions are collected
        extra_excluded: Additional directory names to skip

    Returns:
        Absolute paths of matching files
    """
    extensions = set(language.extensions)
    excluded = frozenset(extra_excluded)
    files: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(repo_path):
        dirnames.sort()
        rel_dir = Path(dirpath).relative_to(repo_path)
        if _is_excluded(rel_dir.parts, excluded):
            dirnames[:] = []
            continue
        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            if _extension(filename) in extensions:
                files.append(Path(dirpath) / filename)

    return files
