"""Repository analysis: detection, extraction, resolution and projections."""

from entityscope.analysis.focus import FocusProjector
from entityscope.analysis.languages import DetectedLanguage
from entityscope.analysis.pipeline import RepoParser
from entityscope.analysis.search import search_entities

__all__ = ["RepoParser", "FocusProjector", "DetectedLanguage", "search_entities"]
