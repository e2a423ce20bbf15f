"""Repository parsing pipeline orchestrator."""

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, TypeVar

from entityscope.analysis.assembler import GraphAssembler, build_repo_info
from entityscope.analysis.detector import collect_source_files, detect_language
from entityscope.analysis.extractor import extractor_for
from entityscope.analysis.imports import ImportResolver, read_module_root
from entityscope.analysis.languages import DetectedLanguage
from entityscope.analysis.parsing import ParsedFile, parse_source_file, relative_path
from entityscope.analysis.references import FileReferences, NameIndex, ReferenceResolver
from entityscope.core.config import Config
from entityscope.core.errors import NoSupportedLanguageError
from entityscope.core.logging import get_logger
from entityscope.schemas.graph import Entity, EntityGraph, RepoInfo

T = TypeVar("T")

logger = get_logger()

PROGRESS_EVERY = 100

# Per-file failures that skip the file instead of aborting the run.
FILE_ERRORS = (OSError, UnicodeDecodeError, ValueError)


class RepoParser:
    """
    Runs detection, collection, entity extraction, reference resolution and
    assembly for one repository.

    Extraction and resolution are two passes separated by a barrier: the
    global name index needs every file's entities before any reference is
    resolved. Each pass may run on a thread pool; results are always merged
    in collector order.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize repository parser.

        Args:
            config: Configuration (defaults when None)
        """
        self.config = config or Config()

    def _run_pass(self, files: list[Path], func: Callable[[int, Path], T]) -> list[T]:
        """Apply func to every file, returning results in file order."""
        workers = self.config.max_workers or 1
        if workers <= 1 or len(files) < 10:
            return [func(i, path) for i, path in enumerate(files)]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(func, range(len(files)), files))

    def _parse(self, file_path: Path, repo_path: Path) -> Optional[ParsedFile]:
        try:
            parsed = parse_source_file(file_path, repo_path)
        except FILE_ERRORS as e:
            logger.warning(
                f"Skipping {relative_path(file_path, repo_path)}: {e}",
                context={"event_type": "file_skipped", "reason": type(e).__name__},
            )
            return None
        if parsed.tree.root_node.has_error:
            logger.debug(f"{parsed.rel_path} has syntax errors; extracting what parsed")
        return parsed

    def parse(self, repo_path: str | Path) -> tuple[RepoInfo, EntityGraph]:
        """
        Parse a repository into a summary and an entity graph.

        Args:
            repo_path: Repository root directory

        Returns:
            (RepoInfo, EntityGraph)

        Raises:
            NoSupportedLanguageError: If no supported-language files are found
        """
        repo_path = Path(repo_path).expanduser().resolve()
        started = time.perf_counter()

        language = detect_language(repo_path, max_depth=self.config.detect_depth)
        if language is None:
            raise NoSupportedLanguageError(
                "Failed to parse repository. No supported language files found."
            )
        logger.log_pipeline_stage(
            "detect", "completed", language=language.value, path=str(repo_path)
        )

        files = collect_source_files(repo_path, language, self.config.excluded_dirs)
        if not files:
            raise NoSupportedLanguageError(
                f"Detected {language.value} but found no collectable source files "
                f"(all candidates are in excluded directories)."
            )
        logger.log_pipeline_stage("collect", "completed", files=len(files))

        extractor = extractor_for(language)
        assembler = GraphAssembler()

        def extract(i: int, file_path: Path) -> Optional[list[Entity]]:
            parsed = self._parse(file_path, repo_path)
            if (i + 1) % PROGRESS_EVERY == 0:
                logger.debug(f"Parsed {i + 1}/{len(files)} files")
            return extractor.extract(parsed) if parsed is not None else None

        stage_start = time.perf_counter()
        extracted = self._run_pass(files, extract)
        ranges = [assembler.add_entities(entities or []) for entities in extracted]
        parsed_count = sum(1 for entities in extracted if entities is not None)
        logger.log_pipeline_stage(
            "extract",
            "completed",
            duration_ms=(time.perf_counter() - stage_start) * 1000,
            files=parsed_count,
            entities=len(assembler.entities),
        )

        # Barrier: the index covers every file before any reference is resolved.
        all_entities = assembler.entities
        index = NameIndex.build(all_entities, normalize_receivers=self.config.normalize_receivers)
        module_root = read_module_root(repo_path) if language == DetectedLanguage.GO else ""
        import_resolver = ImportResolver(language, module_root)
        resolver = ReferenceResolver(language, index)

        def resolve(i: int, file_path: Path) -> Optional[FileReferences]:
            start, end = ranges[i]
            if start == end:
                return None
            parsed = self._parse(file_path, repo_path)
            if parsed is None:
                return None
            imports = import_resolver.resolve(parsed)
            return resolver.resolve_file(parsed, all_entities[start:end], imports)

        stage_start = time.perf_counter()
        for refs in self._run_pass(files, resolve):
            if refs is not None:
                assembler.add_relations(refs.relations, refs.external_deps)
        logger.log_pipeline_stage(
            "resolve",
            "completed",
            duration_ms=(time.perf_counter() - stage_start) * 1000,
            relations=len(assembler.relations),
        )

        graph = assembler.build()
        info = build_repo_info(repo_path, language, graph, parsed_count, module_root)
        logger.log_pipeline_stage(
            "assemble",
            "completed",
            duration_ms=(time.perf_counter() - started) * 1000,
            entities=info.total_entities,
            relations=len(graph.relations),
        )
        return info, graph
