"""Document store adapters and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from bankrag.config import config

from .base import BATCH_INSERT_SIZE, BaseSQLiteStore
from .faiss_store import FaissVectorStore
from .sqlite_store import SQLiteVectorStore

if TYPE_CHECKING:
    from pathlib import Path

VectorBackend = Literal["faiss", "sqlite"]


def get_vector_store(
    store: str | None = None,
    *,
    db_path: Path | None = None,
    index_path: Path | None = None,
    dimension: int | None = None,
    raw_top_k_multiplier: int = 2,
) -> FaissVectorStore | SQLiteVectorStore:
    """Return a configured document store instance.

    Raises:
        ValueError: If an unsupported backend is requested.
    """
    backend = (store or config.VECTOR_BACKEND).lower()
    if db_path is None:
        db_path = config.VECTOR_STORE_DB_PATH
    if dimension is None:
        dimension = config.EMBEDDING_DIMENSION

    if backend == "faiss":
        return FaissVectorStore(
            db_path=db_path,
            index_path=(
                index_path if index_path is not None else config.FAISS_INDEX_PATH
            ),
            dimension=dimension,
            raw_top_k_multiplier=raw_top_k_multiplier,
        )

    if backend == "sqlite":
        return SQLiteVectorStore(db_path=db_path, dimension=dimension)

    msg = f"Unsupported vector store backend: {store}"
    raise ValueError(msg)


__all__ = [
    "BATCH_INSERT_SIZE",
    "BaseSQLiteStore",
    "FaissVectorStore",
    "SQLiteVectorStore",
    "VectorBackend",
    "get_vector_store",
]
