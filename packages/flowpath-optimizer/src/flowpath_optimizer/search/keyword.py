"""Lightweight TF-IDF action search.

Pure-Python, in-process implementation of ActionSearchBackend. Each label
becomes a TF-IDF term vector; queries are ranked by cosine similarity,
which stays within [0, 1] because every weight is non-negative.
"""
from __future__ import annotations

import math
import re
from collections import Counter
from typing import TYPE_CHECKING

from flowpath_core.errors import ActionSearchError
from flowpath_core.logging import get_logger

from flowpath_optimizer.search.catalog import DEFAULT_ACTIONS
from flowpath_optimizer.search.types import ActionMatch

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger("optimizer.search")

# Common English stopwords to filter out
_STOPWORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from",
    "has", "in", "is", "it", "its", "of", "on", "that", "the",
    "to", "was", "will", "with", "this", "my", "me", "i", "want",
})


def tokenize(text: str) -> list[str]:
    """Lowercase, split on non-alphanumerics, and drop stopwords."""
    tokens = re.findall(r"\w+", text.lower())
    return [t for t in tokens if t not in _STOPWORDS and len(t) > 1]


class KeywordActionSearch:
    """Ranks catalog labels against a free-text query.

    Example::

        search = KeywordActionSearch()  # built-in catalog
        for match in search.search("get my money back", limit=5):
            print(f"{match.label}: {match.similarity:.0%}")
    """

    def __init__(
        self,
        labels: Iterable[str] | None = None,
        *,
        min_similarity: float = 0.0,
    ) -> None:
        self._min_similarity = min_similarity
        self._labels: list[str] = []
        self._vectors: list[dict[str, float]] = []
        self._doc_freq: Counter[str] = Counter()
        self.index(DEFAULT_ACTIONS if labels is None else labels)

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    def index(self, labels: Iterable[str]) -> None:
        """Rebuild the index over ``labels`` (duplicates are dropped)."""
        self._labels = list(dict.fromkeys(labels))
        token_lists = [tokenize(label) for label in self._labels]

        self._doc_freq = Counter()
        for tokens in token_lists:
            self._doc_freq.update(set(tokens))

        self._vectors = [self._vectorize(tokens) for tokens in token_lists]
        logger.debug(
            "Indexed %d action labels (%d terms)",
            len(self._labels),
            len(self._doc_freq),
        )

    def search(self, query: str, limit: int = 10) -> list[ActionMatch]:
        """Return up to ``limit`` labels ranked by descending similarity.

        Labels with zero similarity, or below ``min_similarity``, are
        omitted. Equal scores keep catalog order.

        Raises:
            ActionSearchError: If the query is blank or ``limit`` < 1.
        """
        if not query or not query.strip():
            msg = "Search query must not be empty"
            raise ActionSearchError(msg)
        if limit < 1:
            msg = f"Search limit must be >= 1, got {limit}"
            raise ActionSearchError(msg)

        query_vec = self._vectorize(tokenize(query))
        if not query_vec:
            return []

        scored: list[tuple[float, int]] = []
        for position, vector in enumerate(self._vectors):
            score = min(1.0, _cosine(query_vec, vector))
            if score > 0 and score >= self._min_similarity:
                scored.append((score, position))

        scored.sort(key=lambda item: (-item[0], item[1]))
        results = [
            ActionMatch(label=self._labels[position], similarity=score)
            for score, position in scored[:limit]
        ]
        logger.debug("Query %r matched %d labels", query, len(results))
        return results

    # ── Internal Methods ───────────────────────────────────────────

    def _idf(self, term: str) -> float:
        # Smoothed so unseen terms still weigh in the query norm
        total = len(self._labels)
        return math.log((1 + total) / (1 + self._doc_freq.get(term, 0))) + 1.0

    def _vectorize(self, tokens: list[str]) -> dict[str, float]:
        counts = Counter(tokens)
        return {term: tf * self._idf(term) for term, tf in counts.items()}


def _cosine(a: dict[str, float], b: dict[str, float]) -> float:
    if not a or not b:
        return 0.0
    dot = sum(weight * b.get(term, 0.0) for term, weight in a.items())
    norm_a = math.sqrt(sum(w * w for w in a.values()))
    norm_b = math.sqrt(sum(w * w for w in b.values()))
    return dot / (norm_a * norm_b)
