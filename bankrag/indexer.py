"""Bulk indexing of banking data and policies into the document store."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from .banking import build_transaction_pattern
from .config import config
from .document_processing import DocumentLoader, TextChunker
from .models import (
    ACCOUNT_SUMMARY,
    CUSTOMER_PROFILE,
    POLICY,
    TRANSACTION_PATTERN,
    EmbeddedDocument,
    IndexStats,
)
from .policies import BANKING_POLICIES

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from .banking import BankingDataset
    from .embeddings import Embedder
    from .vector_store import BaseSQLiteStore

logger = config.get_logger(__name__)

DEFAULT_PAGE_SIZE = 500


class DocumentIndexer:
    """Embeds banking records and policies and writes them to the store.

    Indexing is idempotent: a non-empty store is left untouched unless a full
    re-index is requested.
    """

    def __init__(  # noqa: PLR0913,PLR0917
        self,
        store: BaseSQLiteStore,
        embedder: Embedder,
        dataset: BankingDataset | None = None,
        policy_dir: Path | None = None,
        chunker: TextChunker | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """Initialize the indexer.

        Args:
            store: Destination document store.
            embedder: Fingerprint backend used for every document.
            dataset: Banking records to index; policies only when None.
            policy_dir: Optional directory of extra TXT/PDF policy documents.
            chunker: Chunker for policy files. If None, uses config.CHUNK_SIZE
                and config.CHUNK_OVERLAP.
            page_size: Number of documents embedded and inserted per page.
        """
        self.store = store
        self.embedder = embedder
        self.dataset = dataset
        self.policy_dir = policy_dir
        self.chunker = chunker or TextChunker(
            chunk_size=config.CHUNK_SIZE, overlap=config.CHUNK_OVERLAP
        )
        self.page_size = max(1, page_size)

    def index_all(self) -> IndexStats:
        """Index all banking data unless the store already holds documents.

        A failed run deletes whatever it inserted so the next run starts clean.

        Returns:
            Per-type counts, or ``skipped=True`` when nothing was done.
        """
        existing_count = self.store.count()
        if existing_count > 0:
            logger.info(
                "Embeddings already exist (%d), skipping indexing.", existing_count
            )
            return IndexStats(skipped=True)

        logger.info("Starting document indexing...")
        start = time.perf_counter()

        try:
            stats = IndexStats(
                profiles=self.index_customer_profiles(),
                accounts=self.index_account_summaries(),
                patterns=self.index_transaction_patterns(),
                policies=self.index_policies(),
            )
            self.store.save()
        except Exception:
            logger.exception("Indexing failed, removing partially indexed documents")
            self.store.delete_all()
            raise

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "Indexing complete in %dms: %d profiles, %d accounts, %d patterns, "
            "%d policies",
            elapsed_ms,
            stats.profiles,
            stats.accounts,
            stats.patterns,
            stats.policies,
        )
        return stats

    def reindex_all(self) -> IndexStats:
        """Delete every document and index from scratch.

        Returns:
            Per-type counts of the new index.
        """
        logger.info("Deleting all existing embeddings for re-index...")
        self.store.delete_all()
        return self.index_all()

    def _embed_and_insert(self, documents: Sequence[EmbeddedDocument]) -> int:
        """Embed and insert documents page by page.

        Returns:
            Number of documents inserted.
        """
        indexed = 0
        for page_start in range(0, len(documents), self.page_size):
            page = documents[page_start : page_start + self.page_size]
            embeddings = self.embedder.embed_batch([doc.content for doc in page])
            for doc, embedding in zip(page, embeddings, strict=True):
                doc.embedding = embedding
            indexed += self.store.batch_insert(page)
            logger.info("  Indexed %d documents...", indexed)
        return indexed

    def index_customer_profiles(self) -> int:
        if self.dataset is None:
            return 0
        logger.info("Indexing customer profiles...")
        documents = [
            EmbeddedDocument(
                content=customer.to_profile_text(),
                source_type=CUSTOMER_PROFILE,
                source_id=customer.customer_id,
                metadata={
                    "customer_id": customer.customer_id,
                    "segment": customer.segment,
                    "risk_rating": customer.risk_rating,
                    "credit_score": customer.credit_score or 0,
                },
            )
            for customer in self.dataset.customers
        ]
        return self._embed_and_insert(documents)

    def index_account_summaries(self) -> int:
        if self.dataset is None:
            return 0
        logger.info("Indexing account summaries...")
        documents = []
        for account in self.dataset.accounts:
            customer = self.dataset.customer(account.customer_id)
            documents.append(
                EmbeddedDocument(
                    content=account.to_summary_text(customer),
                    source_type=ACCOUNT_SUMMARY,
                    source_id=account.account_number,
                    metadata={
                        "account_number": account.account_number,
                        "account_type": account.account_type,
                        "customer_id": account.customer_id,
                        "balance": str(account.balance),
                        "status": account.status,
                    },
                )
            )
        return self._embed_and_insert(documents)

    def index_transaction_patterns(self) -> int:
        """Index one aggregated pattern per account that has transactions.

        Returns:
            Number of pattern documents inserted.
        """
        if self.dataset is None:
            return 0
        logger.info("Indexing transaction patterns...")
        documents = []
        for account in self.dataset.accounts:
            transactions = self.dataset.transactions_for(account.account_number)
            if not transactions:
                continue
            customer = self.dataset.customer(account.customer_id)
            documents.append(
                EmbeddedDocument(
                    content=build_transaction_pattern(account, customer, transactions),
                    source_type=TRANSACTION_PATTERN,
                    source_id=account.account_number,
                    metadata={
                        "account_number": account.account_number,
                        "customer_id": account.customer_id,
                        "account_type": account.account_type,
                    },
                )
            )
        return self._embed_and_insert(documents)

    def index_policies(self) -> int:
        """Index the built-in policies and any policy files on disk.

        Returns:
            Number of policy documents inserted.
        """
        logger.info("Indexing banking policies...")
        documents = [
            EmbeddedDocument(
                content=text,
                source_type=POLICY,
                source_id=policy_id,
                metadata={"policy_id": policy_id},
            )
            for policy_id, text in BANKING_POLICIES
        ]

        if self.policy_dir is not None:
            for path in DocumentLoader.list_documents(self.policy_dir):
                text = DocumentLoader.load_document(path)
                chunks = self.chunker.chunk_text(text, source=path.stem)
                for chunk in chunks:
                    chunk.metadata["policy_id"] = chunk.source_id
                documents.extend(chunks)

        return self._embed_and_insert(documents)

    def status(self) -> dict[str, Any]:
        """Report the store size and embedding configuration.

        Returns:
            Embedding count, backend and embedding strategy details.
        """
        return {
            "embeddings": self.store.count(),
            "vector_backend": self.store.backend,
            "embedding_provider": self.embedder.provider,
            "embedding_dimension": self.embedder.dimension,
        }
