"""Similarity search over the document store with thresholding and degradation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import config
from .models import CHAT, normalize_source_type

if TYPE_CHECKING:
    import numpy as np

    from .models import RankedResult
    from .vector_store import BaseSQLiteStore

logger = config.get_logger(__name__)


class SimilaritySearchGateway:
    """Issues nearest-neighbour queries and returns ranked, thresholded results.

    Store failures never reach the caller: they are logged and the search
    degrades to an empty result set, which downstream code reports as "no
    relevant information".
    """

    def __init__(self, store: BaseSQLiteStore) -> None:
        self.store = store

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int,
        threshold: float,
        source_type: str | None = None,
    ) -> list[RankedResult]:
        """Return up to ``top_k`` documents with similarity >= ``threshold``.

        Args:
            query_embedding: Query vector in the store's dimension.
            top_k: Maximum number of results.
            threshold: Minimum cosine similarity.
            source_type: Restrict results to exactly this type. When omitted,
                conversational documents are excluded.

        Returns:
            Results ordered by non-increasing similarity.
        """
        if top_k <= 0:
            return []

        type_filter = normalize_source_type(source_type)
        try:
            raw_results = self.store.search(
                query_embedding,
                top_k=top_k,
                threshold=threshold,
                source_type=type_filter,
            )
        except Exception:  # noqa: BLE001
            logger.exception(
                "Vector similarity search failed (filter=%s); returning no results",
                type_filter,
            )
            return []

        results = [
            result
            for result in raw_results
            if result.similarity >= threshold
            and (
                result.source_type == type_filter
                if type_filter is not None
                else result.source_type != CHAT
            )
        ]
        results.sort(key=lambda result: result.similarity, reverse=True)
        results = results[:top_k]

        logger.info(
            "Retrieved %d relevant documents (threshold: %.2f, filter: %s)",
            len(results),
            threshold,
            type_filter or "none",
        )
        return results
