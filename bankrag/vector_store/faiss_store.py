"""FAISS-backed document store with SQLite metadata."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

import faiss
import numpy as np

from bankrag.config import config
from bankrag.exceptions import VectorStoreError
from bankrag.models import RankedResult
from bankrag.vector_store.base import BaseSQLiteStore

if TYPE_CHECKING:
    from bankrag.models import EmbeddedDocument

logger = config.get_logger(__name__)


class FaissVectorStore(BaseSQLiteStore):
    """Document storage using FAISS for vectors and SQLite for metadata.

    The index is an exact inner-product index over L2-normalized vectors, so
    inner product equals cosine similarity.
    """

    backend = "faiss"
    stores_vectors_inline = False

    def __init__(
        self,
        db_path: Path = Path("data/bankrag.db"),
        index_path: Path = Path("data/faiss/index.faiss"),
        dimension: int | None = None,
        raw_top_k_multiplier: int = 2,
    ) -> None:
        """Configure FAISS-backed document store."""
        self.index_path = Path(index_path)
        self.index_path.parent.mkdir(exist_ok=True, parents=True)

        self.index: faiss.IndexIDMap | None = None
        self.raw_top_k_multiplier = max(1, raw_top_k_multiplier)

        super().__init__(db_path, dimension)

    def _init_index(self) -> faiss.IndexIDMap:
        """Initialize an empty FAISS index.

        Returns:
            The new index.
        """
        base_index = faiss.IndexFlatIP(self.dimension)
        self.index = faiss.IndexIDMap(base_index)
        logger.info("Initialized FAISS IndexIDMap with dimension %d", self.dimension)
        return self.index

    def _add_vectors(self, row_ids: list[int], vectors: list[np.ndarray]) -> None:
        """Add normalized vectors to the index under their SQLite row ids.

        Raises:
            RuntimeError: If the FAISS index cannot store provided ids.
        """
        if not row_ids:
            return
        index = self.index if self.index is not None else self._init_index()
        matrix = np.vstack(vectors).astype("float32")
        ids_array = np.asarray(row_ids, dtype="int64")
        try:
            index.add_with_ids(matrix, ids_array)  # pyright: ignore[reportCallIssue]
        except RuntimeError:
            logger.exception(
                "FAISS index does not support add_with_ids; ensure IndexIDMap is used."
            )
            raise
        logger.info("Added %d vectors to FAISS index", len(row_ids))

    def _fetch_documents(
        self,
        cursor: sqlite3.Cursor,
        row_ids: list[int],
        source_type: str | None,
    ) -> dict[int, EmbeddedDocument]:
        """Fetch the documents for ``row_ids`` that pass the type filter.

        Returns:
            Mapping of row id to document.
        """
        if not row_ids:
            return {}
        clause, params = self._type_clause(source_type)
        placeholders = ", ".join("?" for _ in row_ids)
        cursor.execute(
            f"""
            SELECT id, content, source_type, source_id, metadata
            FROM document_embeddings
            WHERE id IN ({placeholders}) AND {clause}
            """,  # noqa: S608
            (*row_ids, *params),
        )
        return {int(row[0]): self._build_document_from_row(row) for row in cursor}

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 5,
        threshold: float = 0.0,
        source_type: str | None = None,
    ) -> list[RankedResult]:
        """Search similar documents using the FAISS index.

        The candidate window starts at ``raw_top_k_multiplier * top_k`` and
        doubles until enough candidates survive the type filter and threshold
        or the whole index has been considered.

        Returns:
            Ranked results ordered by descending similarity.

        Raises:
            VectorStoreError: If document metadata cannot be read.
        """
        if top_k <= 0:
            return []

        index = self.index
        if index is None:
            logger.warning("FAISS index not initialized; returning no results")
            return []
        if index.ntotal == 0:
            return []

        query = self._prepare_embedding(query_embedding).reshape(1, -1)
        raw_top_k = min(max(top_k, self.raw_top_k_multiplier * top_k), index.ntotal)

        while True:
            scores, vector_ids = index.search(query, raw_top_k)  # pyright: ignore[reportCallIssue]
            candidates = [
                (float(score), int(vector_id))
                for score, vector_id in zip(scores[0], vector_ids[0], strict=True)
                if int(vector_id) != -1  # faiss returns -1 for empty results
            ]

            try:
                with sqlite3.connect(str(self.db_path)) as conn:
                    documents = self._fetch_documents(
                        conn.cursor(),
                        [vector_id for _, vector_id in candidates],
                        source_type,
                    )
            except sqlite3.Error as exc:
                msg = f"Unable to read document metadata from {self.db_path}"
                raise VectorStoreError(msg) from exc

            results: list[RankedResult] = []
            below_threshold = False
            for score, vector_id in candidates:
                if score < threshold:
                    below_threshold = True
                    break
                document = documents.get(vector_id)
                if document is not None:
                    results.append(RankedResult(document=document, similarity=score))
                if len(results) >= top_k:
                    break

            exhausted = raw_top_k >= index.ntotal
            if len(results) >= top_k or below_threshold or exhausted:
                return results[:top_k]
            raw_top_k = min(raw_top_k * 2, index.ntotal)

    def delete_all(self) -> None:
        """Delete all metadata rows and reset the index."""
        super().delete_all()
        self.index = None
        if self.index_path.exists():
            self.index_path.unlink()
            logger.info("Removed FAISS index file %s", self.index_path)

    def save(self) -> None:
        """Persist FAISS index to disk."""
        index = self.index
        if index is None:
            logger.warning("No FAISS index to save")
            return

        self.index_path.parent.mkdir(exist_ok=True, parents=True)
        faiss.write_index(index, str(self.index_path))
        logger.info("Saved FAISS index to %s", self.index_path)

    def load(self) -> None:
        """Load the FAISS index from disk.

        Raises:
            ValueError: If the stored index dimension differs from the store's.
        """
        if not self.index_path.exists():
            logger.warning(
                "FAISS index not found at %s. Start with an empty index.",
                self.index_path,
            )
            self.index = None
            return

        loaded_index = faiss.read_index(str(self.index_path))
        if loaded_index.d != self.dimension:
            msg = (
                f"FAISS index dimension {loaded_index.d} does not match "
                f"store dimension {self.dimension}"
            )
            raise ValueError(msg)
        if not isinstance(loaded_index, (faiss.IndexIDMap, faiss.IndexIDMap2)):
            logger.warning(
                "Loaded FAISS index is %s; wrapping with IndexIDMap to enable IDs",
                type(loaded_index).__name__,
            )
            loaded_index = faiss.IndexIDMap(loaded_index)
        self.index = loaded_index
        logger.info(
            "Loaded FAISS index from %s with %d vectors",
            self.index_path,
            loaded_index.ntotal,
        )

        row_count = self.count()
        if row_count != loaded_index.ntotal:
            logger.warning(
                "FAISS index holds %d vectors but metadata store has %d documents; "
                "consider a full re-index.",
                loaded_index.ntotal,
                row_count,
            )
