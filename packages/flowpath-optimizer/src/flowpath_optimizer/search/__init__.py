"""Action search: free-text lookup over a catalog of action labels.

This package is independent of the path optimizer; it shares no data with
the transition graph.

Core components:

- ActionSearchBackend: Protocol every search backend satisfies
- ActionMatch: A ranked (label, similarity) hit
- KeywordActionSearch: In-process TF-IDF cosine-similarity backend
- DEFAULT_ACTIONS / load_catalog: Built-in and file-based label catalogs

Example usage::

    from flowpath_optimizer.search import KeywordActionSearch

    search = KeywordActionSearch()
    for match in search.search("cancel my order", limit=3):
        print(f"[{match.similarity:.2f}] {match.label}")
"""
from __future__ import annotations

from flowpath_optimizer.search.catalog import DEFAULT_ACTIONS, load_catalog
from flowpath_optimizer.search.keyword import KeywordActionSearch, tokenize
from flowpath_optimizer.search.types import ActionMatch, ActionSearchBackend

__all__ = [
    "DEFAULT_ACTIONS",
    "ActionMatch",
    "ActionSearchBackend",
    "KeywordActionSearch",
    "load_catalog",
    "tokenize",
]
