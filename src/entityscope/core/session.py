"""Repository session: the six query operations over one loaded repository."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from entityscope.analysis.focus import FocusProjector
from entityscope.analysis.pipeline import RepoParser
from entityscope.analysis.search import search_entities
from entityscope.core.config import Config
from entityscope.core.errors import (
    EntityNotFoundError,
    EntityScopeError,
    NoRepoLoadedError,
    ParseTaskError,
    RepoPathError,
)
from entityscope.schemas.focus import FocusView, GraphData, SearchResult
from entityscope.schemas.graph import Entity, EntityGraph, RepoInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedRepository:
    """Everything known about one opened repository; replaced as a unit."""

    root: Path
    info: RepoInfo
    graph: EntityGraph
    projector: FocusProjector = field(repr=False, compare=False)

    @classmethod
    def create(cls, root: Path, info: RepoInfo, graph: EntityGraph) -> "LoadedRepository":
        return cls(root=root, info=info, graph=graph, projector=FocusProjector(graph))


def load_repository(path: str | Path, config: Optional[Config] = None) -> LoadedRepository:
    """
    Parse a repository off the calling thread and wait for the result.

    Raises:
        RepoPathError: If the path does not exist or is not a directory
        NoSupportedLanguageError: If no supported-language files are found
        ParseTaskError: If the parse job fails unexpectedly
    """
    root = Path(path).expanduser()
    if not root.exists():
        raise RepoPathError(f"Path does not exist: {path}")
    if not root.is_dir():
        raise RepoPathError(f"Path is not a directory: {path}")
    root = root.resolve()

    parser = RepoParser(config)
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="entityscope-parse") as executor:
        future = executor.submit(parser.parse, root)
        try:
            info, graph = future.result()
        except EntityScopeError:
            raise
        except Exception as e:
            logger.error(f"Parse task failed for {root}: {e}", exc_info=True)
            raise ParseTaskError(e) from e

    return LoadedRepository.create(root, info, graph)


class Explorer:
    """Holds at most one loaded repository and answers queries against it."""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize explorer.

        Args:
            config: Configuration used for parsing and search limits
        """
        self.config = config or Config()
        self._lock = threading.Lock()
        self._current: Optional[LoadedRepository] = None

    def current(self) -> LoadedRepository:
        """The loaded repository, for callers that pass it around explicitly."""
        with self._lock:
            loaded = self._current
        if loaded is None:
            raise NoRepoLoadedError()
        return loaded

    def open_repo(self, path: str | Path) -> RepoInfo:
        """Parse a repository and replace the current session with it."""
        loaded = load_repository(path, self.config)
        with self._lock:
            self._current = loaded
        logger.info(f"Opened {loaded.root}: {loaded.info.total_entities} entities")
        return loaded.info

    def get_repo_info(self) -> RepoInfo:
        return self.current().info

    def search_entities(self, query: str) -> list[SearchResult]:
        return search_entities(self.current().graph, query, limit=self.config.search_limit)

    def get_entity_focus(self, entity_id: str) -> FocusView:
        return self.current().projector.focus(entity_id)

    def get_all_entities(self) -> list[Entity]:
        return list(self.current().graph.entities)

    def get_entity_source(self, entity_id: str) -> str:
        entity = self.current().graph.get_entity(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity.source

    def get_graph_data(self) -> GraphData:
        return self.current().projector.graph_data()
