"""Entity search with a fixed scoring ladder."""

from typing import Optional

from entityscope.schemas.focus import SearchResult
from entityscope.schemas.graph import Entity, EntityGraph

DEFAULT_LIMIT = 50


def score_entity(entity: Entity, query_lower: str) -> Optional[float]:
    """Score one entity against a lowercased query; None when it does not match."""
    name = entity.name.lower()
    if name == query_lower:
        return 1.0
    if name.startswith(query_lower):
        return 0.9
    if query_lower in name:
        return 0.7
    if query_lower in entity.kind.label:
        return 0.3
    if query_lower in entity.package.lower():
        return 0.4
    if query_lower in entity.signature.lower():
        return 0.2
    return None


def search_entities(graph: EntityGraph, query: str, limit: int = DEFAULT_LIMIT) -> list[SearchResult]:
    """Best-scoring entities first; ties keep graph order."""
    query_lower = query.lower()
    results = []
    for entity in graph.entities:
        score = score_entity(entity, query_lower)
        if score is not None:
            results.append(SearchResult(entity=entity, score=score))
    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]
