"""SQLite-based document store with exact numpy cosine search."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import numpy as np

from bankrag.config import config
from bankrag.exceptions import VectorStoreError
from bankrag.models import RankedResult
from bankrag.vector_store.base import BaseSQLiteStore

logger = config.get_logger(__name__)


class SQLiteVectorStore(BaseSQLiteStore):
    """Document storage using SQLite rows with the vector stored as a BLOB."""

    backend = "sqlite"
    stores_vectors_inline = True

    def __init__(
        self,
        db_path: Path = Path("data/bankrag.db"),
        dimension: int | None = None,
    ) -> None:
        """Initialize the SQLiteVectorStore.

        Args:
            db_path: Path to the SQLite database file.
            dimension: Fixed embedding dimension. If None, uses
                config.EMBEDDING_DIMENSION.
        """
        super().__init__(db_path, dimension)

    def load(self) -> None:
        """Warn when rows written by the faiss backend have no embedding blob."""
        with sqlite3.connect(str(self.db_path)) as conn:
            (missing,) = conn.execute(
                "SELECT COUNT(*) FROM document_embeddings WHERE embedding IS NULL"
            ).fetchone()
        if missing:
            logger.warning(
                "%d documents in %s have no embedding and cannot be searched; "
                "run a re-index for the sqlite backend",
                missing,
                self.db_path,
            )

    @staticmethod
    def cosine_similarity(
        query_embedding: np.ndarray,
        embeddings: np.ndarray,
    ) -> np.ndarray:
        """Calculate cosine similarity between query and document embeddings.

        Returns:
            np.ndarray: Array of cosine similarity scores
                    between the query and each document embedding.
        """
        query_norm = np.linalg.norm(query_embedding)
        doc_norms = np.linalg.norm(embeddings, axis=1)
        denominators = doc_norms * query_norm
        dots = embeddings @ query_embedding
        return np.divide(
            dots,
            denominators,
            out=np.zeros_like(dots, dtype=np.float64),
            where=denominators > 0,
        )

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 5,
        threshold: float = 0.0,
        source_type: str | None = None,
    ) -> list[RankedResult]:
        """Search for documents similar to the query embedding.

        Returns:
            Up to ``top_k`` results with similarity >= ``threshold``, ordered by
            descending similarity; ties keep insertion order.

        Raises:
            VectorStoreError: If the document table cannot be read.
        """
        if top_k <= 0:
            return []

        query = self._prepare_embedding(query_embedding)
        clause, params = self._type_clause(source_type)

        try:
            with sqlite3.connect(str(self.db_path)) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"""
                    SELECT id, content, source_type, source_id, metadata, embedding
                    FROM document_embeddings
                    WHERE {clause} AND embedding IS NOT NULL
                    ORDER BY id
                    """,  # noqa: S608
                    params,
                )
                rows = cursor.fetchall()
        except sqlite3.Error as exc:
            msg = f"Unable to read documents from {self.db_path}"
            raise VectorStoreError(msg) from exc

        if not rows:
            return []

        embeddings = np.vstack(
            [np.frombuffer(row[5], dtype=np.float32) for row in rows]
        ).astype(np.float64)
        similarities = self.cosine_similarity(query.astype(np.float64), embeddings)
        order = np.argsort(-similarities, kind="stable")

        results: list[RankedResult] = []
        for idx in order:
            score = float(similarities[idx])
            if score < threshold:
                break
            row = rows[idx]
            document = self._build_document_from_row(
                row, embedding=np.frombuffer(row[5], dtype=np.float32)
            )
            results.append(RankedResult(document=document, similarity=score))
            if len(results) >= top_k:
                break

        logger.debug(
            "SQLite search scanned %d vectors, returned %d", len(rows), len(results)
        )
        return results
