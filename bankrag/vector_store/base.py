"""Shared helpers for SQLite-backed document stores."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from bankrag.config import config
from bankrag.models import CHAT, EmbeddedDocument, normalize_source_type

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bankrag.models import RankedResult

BATCH_INSERT_SIZE = 500

logger = config.get_logger(__name__)


class BaseSQLiteStore:
    """Common schema management and helpers for stores using SQLite metadata.

    Subclasses decide where vectors live: inline in the ``embedding`` column,
    or in an external index keyed by row id.
    """

    backend = "base"
    stores_vectors_inline = True

    def __init__(self, db_path: Path, dimension: int | None = None) -> None:
        """Initialize metadata store and ensure schema exists."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self.dimension = dimension or config.EMBEDDING_DIMENSION
        self._create_tables()

    def _create_tables(self) -> None:
        """Create the document table and its indexes if they don't exist."""
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS document_embeddings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL,
                    source_type TEXT NOT NULL,
                    source_id TEXT,
                    metadata TEXT DEFAULT '{}',
                    embedding BLOB,
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute(
                (
                    "CREATE INDEX IF NOT EXISTS idx_embeddings_source "
                    "ON document_embeddings(source_type)"
                ),
            )
            conn.commit()

    def _prepare_embedding(self, embedding: np.ndarray | None) -> np.ndarray:
        """Validate dimension and L2-normalize an embedding.

        Returns:
            Unit-length float32 vector (zero vectors are kept as-is).

        Raises:
            ValueError: If the embedding is missing or has the wrong dimension.
        """
        if embedding is None:
            msg = "Document has no embedding"
            raise ValueError(msg)
        vector = np.asarray(embedding, dtype=np.float32).reshape(-1)
        if vector.shape[0] != self.dimension:
            msg = (
                f"Embedding dimension {vector.shape[0]} does not match "
                f"store dimension {self.dimension}"
            )
            raise ValueError(msg)
        norm = np.linalg.norm(vector)
        if norm == 0:
            return vector
        return vector / norm

    @staticmethod
    def _type_clause(source_type: str | None) -> tuple[str, tuple[str, ...]]:
        """Build the WHERE fragment for an optional source-type filter.

        Without a filter, conversational documents are always excluded.

        Returns:
            SQL fragment and its parameters.
        """
        normalized = normalize_source_type(source_type)
        if normalized is None:
            return "source_type != ?", (CHAT,)
        return "source_type = ?", (normalized,)

    def insert(self, document: EmbeddedDocument) -> None:
        """Insert a single document."""
        self.batch_insert([document])

    def batch_insert(self, documents: Sequence[EmbeddedDocument]) -> int:
        """Insert documents in chunks of ``BATCH_INSERT_SIZE`` rows.

        Returns:
            Number of documents inserted.
        """
        if not documents:
            return 0

        vectors = [self._prepare_embedding(doc.embedding) for doc in documents]
        inserted = 0

        for start in range(0, len(documents), BATCH_INSERT_SIZE):
            batch = documents[start : start + BATCH_INSERT_SIZE]
            batch_vectors = vectors[start : start + BATCH_INSERT_SIZE]
            with sqlite3.connect(str(self.db_path)) as conn:
                cursor = conn.cursor()
                row_ids = [
                    self._insert_row(cursor, doc, vector)
                    for doc, vector in zip(batch, batch_vectors, strict=True)
                ]
                conn.commit()
            self._add_vectors(row_ids, batch_vectors)
            inserted += len(row_ids)

        logger.info("Inserted %d documents into %s store", inserted, self.backend)
        return inserted

    def _insert_row(
        self,
        cursor: sqlite3.Cursor,
        document: EmbeddedDocument,
        vector: np.ndarray,
    ) -> int:
        """Persist a document row and return its id.

        Raises:
            RuntimeError: If the row cannot be inserted.

        Returns:
            Row id assigned by SQLite.
        """
        blob = None
        if self.stores_vectors_inline:
            blob = vector.astype(np.float32).tobytes()
        cursor.execute(
            """
            INSERT INTO document_embeddings (
                content, source_type, source_id, metadata, embedding
            )
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                document.content,
                document.source_type,
                document.source_id,
                json.dumps(document.metadata, default=str),
                blob,
            ),
        )
        row_id = cursor.lastrowid
        if row_id is None:
            msg = "Failed to insert document row"
            raise RuntimeError(msg)
        return int(row_id)

    def _add_vectors(self, row_ids: list[int], vectors: list[np.ndarray]) -> None:
        """Hook for stores that keep vectors outside SQLite."""

    def count(self) -> int:
        """Count stored documents.

        Returns:
            Number of rows in the document table.
        """
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM document_embeddings")
            return int(cursor.fetchone()[0])

    def delete_all(self) -> None:
        """Delete every stored document (used only by a full re-index)."""
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute("DELETE FROM document_embeddings")
            conn.commit()
        logger.info("Deleted all documents from %s store", self.backend)

    def search(
        self,
        query_embedding: np.ndarray,
        top_k: int = 5,
        threshold: float = 0.0,
        source_type: str | None = None,
    ) -> list[RankedResult]:
        """Placeholder for similarity search implemented by subclasses.

        Returns:
            Ranked results ordered by descending similarity.
        """
        raise NotImplementedError

    def save(self) -> None:  # noqa: PLR6301
        """Persist any in-memory state. Rows are already committed to SQLite."""
        logger.debug("Data already persisted in SQLite database")

    def load(self) -> None:  # noqa: PLR6301
        """Load any in-memory state from disk."""
        logger.debug("Nothing to load for SQLite-only store")

    @staticmethod
    def _build_document_from_row(
        row: tuple,
        *,
        embedding: np.ndarray | None = None,
    ) -> EmbeddedDocument:
        """Create an EmbeddedDocument from a metadata row.

        Returns:
            EmbeddedDocument hydrated with metadata and optional embedding.
        """
        row_id, content, source_type, source_id, metadata_json = row[:5]
        metadata: dict[str, Any] = json.loads(metadata_json) if metadata_json else {}
        metadata.setdefault("document_id", row_id)
        return EmbeddedDocument(
            content=content,
            source_type=source_type,
            source_id=source_id,
            metadata=metadata,
            embedding=embedding,
        )
