"""EntityScope - language-agnostic entity and relation graphs for source repositories."""

__version__ = "0.3.0"
