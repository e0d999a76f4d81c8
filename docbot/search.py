"""Fuzzy text search over documentation chunks and knowledge base items."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, TypeVar

from rapidfuzz import fuzz, process, utils

from .config import config

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

T = TypeVar("T")

logger = config.get_logger(__name__)


class FuzzySearchIndex(Generic[T]):
    """Approximate-match index over a fixed sequence of items.

    Each item is reduced to a search key by ``key``. Queries are matched
    against keys with a partial (best-substring) ratio, so typos and
    partial phrasing still match. Scores are distances in ``[0, 1]``,
    lower is better; candidates with a distance above ``threshold`` are
    discarded.
    """

    def __init__(
        self,
        items: Sequence[T],
        key: Callable[[T], str],
        threshold: float = 0.5,
    ) -> None:
        """Build the index.

        Args:
            items: Items to index. Their order only breaks ties.
            key: Extracts the searchable text from an item.
            threshold: Maximum accepted distance on a 0-1 scale.

        Raises:
            ValueError: If threshold lies outside ``[0, 1]``.
        """
        if not 0.0 <= threshold <= 1.0:
            msg = f"threshold must be between 0 and 1, got {threshold}"
            raise ValueError(msg)
        self.items: list[T] = list(items)
        self.threshold = threshold
        self._keys = [utils.default_process(key(item)) for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def search(self, query: str, limit: int | None = None) -> list[tuple[T, float]]:
        """Find items whose key approximately contains the query.

        Args:
            query: Free-text query.
            limit: Maximum number of results, or None for all matches.

        Returns:
            ``(item, distance)`` pairs ordered best first.
        """
        processed_query = utils.default_process(query)
        if not processed_query or not self.items:
            return []

        matches = process.extract(
            processed_query,
            self._keys,
            scorer=fuzz.partial_ratio,
            processor=None,
            score_cutoff=(1.0 - self.threshold) * 100,
            limit=limit,
        )
        results = [
            (self.items[index], round(1.0 - score / 100, 6))
            for _, score, index in matches
        ]
        logger.debug("Fuzzy search for %r returned %d results", query, len(results))
        return results
