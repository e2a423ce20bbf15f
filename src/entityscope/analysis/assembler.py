"""Graph assembly and repository summary."""

from pathlib import Path

from entityscope.analysis.imports import MODULE_MANIFEST
from entityscope.analysis.languages import DetectedLanguage
from entityscope.schemas.graph import Entity, EntityGraph, Relation, RepoAttribute, RepoInfo


class GraphAssembler:
    """Concatenates per-file results into one EntityGraph."""

    def __init__(self):
        self.entities: list[Entity] = []
        self.relations: list[Relation] = []
        self.external_deps: dict[str, list[str]] = {}

    def add_entities(self, entities: list[Entity]) -> tuple[int, int]:
        """Append one file's entities; returns its (start, end) range in the graph."""
        start = len(self.entities)
        self.entities.extend(entities)
        return start, len(self.entities)

    def add_relations(self, relations: list[Relation], external_deps: dict[str, list[str]]) -> None:
        self.relations.extend(relations)
        for entity_id, deps in external_deps.items():
            known = self.external_deps.setdefault(entity_id, [])
            known.extend(dep for dep in deps if dep not in known)

    def build(self) -> EntityGraph:
        return EntityGraph(
            entities=self.entities,
            relations=self.relations,
            external_deps=self.external_deps,
        )


def build_repo_info(
    repo_path: Path,
    language: DetectedLanguage,
    graph: EntityGraph,
    total_files: int,
    module_root: str,
) -> RepoInfo:
    """
    Summarize a loaded repository for display.

    Args:
        repo_path: Repository root
        language: Detected language
        graph: Assembled graph
        total_files: Number of files that were read and parsed
        module_root: Module path (Go) used for import resolution

    Returns:
        RepoInfo with language-specific attributes
    """
    name = repo_path.name or "unknown"
    packages = sorted({entity.package for entity in graph.entities})
    attributes: list[RepoAttribute] = []

    if language == DetectedLanguage.GO:
        module_name = module_root
        attributes.append(RepoAttribute(label="Module", value=module_root))
        attributes.append(RepoAttribute(label="Packages", value=str(len(packages))))
        manifest = repo_path / MODULE_MANIFEST
        if manifest.exists():
            attributes.append(
                RepoAttribute(label=MODULE_MANIFEST, value=MODULE_MANIFEST, link=str(manifest))
            )
    else:
        module_name = name
        attributes.append(RepoAttribute(label="Language", value=language.value))
        attributes.append(RepoAttribute(label="Files", value=str(total_files)))
        attributes.append(RepoAttribute(label="Packages", value=str(len(packages))))

    return RepoInfo(
        path=str(repo_path),
        name=name,
        language=language.value,
        total_files=total_files,
        total_entities=len(graph.entities),
        packages=packages,
        module_name=module_name,
        attributes=attributes,
    )
