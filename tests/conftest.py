"""Test configuration and fixtures for BankRAG tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock API responses
- Embedder and store fixtures
- Banking sample data
- Pipeline factories
"""

from unittest.mock import Mock, patch

import numpy as np
import pytest

from bankrag import (
    BankingDataset,
    EmbeddedDocument,
    FaissVectorStore,
    InMemoryConversationStore,
    LocalEmbedder,
    MockGenerator,
    RAGEngine,
    SimilaritySearchGateway,
    SQLiteConversationStore,
    SQLiteVectorStore,
)


class TestConstants:
    """Centralized test constants shared across the test suite."""

    TEST_API_KEY = "test-key"
    TEST_OPENAI_MODEL = "text-embedding-3-small"
    DEFAULT_EMBEDDING_DIMENSION = 384
    SMALL_EMBEDDING_DIMENSION = 8

    SMALL_CHUNK_SIZE = 100
    SMALL_CHUNK_OVERLAP = 20


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response.

    Args:
        embeddings: List of embedding vectors to return.

    Returns:
        Mock object representing OpenAI embeddings API response.
    """
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Args:
        content: The content for the chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


def unit_vector(dimension: int, *hot: int) -> np.ndarray:
    """Build a normalized vector with ones at the given positions."""
    vector = np.zeros(dimension, dtype=np.float32)
    for position in hot:
        vector[position] = 1.0
    norm = np.linalg.norm(vector)
    return vector / norm if norm > 0 else vector


SAMPLE_BANKING_DATA = {
    "customers": [
        {
            "customer_id": "CUST-001",
            "first_name": "Alice",
            "last_name": "Johnson",
            "email": "alice@example.com",
            "phone": "555-0100",
            "address_city": "New York",
            "address_state": "NY",
            "address_zip": "10001",
            "credit_score": 780,
            "customer_since": "2015-03-01",
            "segment": "PREMIUM",
            "risk_rating": "LOW",
        },
        {
            "customer_id": "CUST-002",
            "first_name": "Bob",
            "last_name": "Smith",
            "email": "bob@example.com",
            "address_city": "Austin",
            "address_state": "TX",
            "address_zip": "73301",
            "customer_since": "2020-07-15",
            "segment": "RETAIL",
            "risk_rating": "MEDIUM",
        },
    ],
    "accounts": [
        {
            "account_number": "ACC-1001",
            "customer_id": "CUST-001",
            "account_type": "CHECKING",
            "balance": "2500.00",
            "opened_date": "2015-03-01",
        },
        {
            "account_number": "ACC-1002",
            "customer_id": "CUST-001",
            "account_type": "SAVINGS",
            "balance": "15000.00",
            "interest_rate": "3.5",
            "opened_date": "2016-01-10",
        },
        {
            "account_number": "ACC-2001",
            "customer_id": "CUST-002",
            "account_type": "CREDIT_CARD",
            "balance": "420.10",
            "credit_limit": "5000",
            "opened_date": "2021-02-01",
        },
    ],
    "transactions": [
        {
            "transaction_id": "TXN-1",
            "account_number": "ACC-1001",
            "transaction_type": "DEPOSIT",
            "amount": "3000.00",
            "transaction_date": "2024-01-02T09:00:00",
            "channel": "ONLINE",
            "description": "Payroll",
        },
        {
            "transaction_id": "TXN-2",
            "account_number": "ACC-1001",
            "transaction_type": "PURCHASE",
            "amount": "120.50",
            "transaction_date": "2024-01-03T12:30:00",
            "channel": "POS",
            "merchant_name": "Green Grocer",
            "merchant_category": "GROCERIES",
        },
        {
            "transaction_id": "TXN-3",
            "account_number": "ACC-1001",
            "transaction_type": "PURCHASE",
            "amount": "80.00",
            "transaction_date": "2024-01-05T19:00:00",
            "channel": "POS",
            "merchant_name": "Bistro",
            "merchant_category": "DINING",
        },
        {
            "transaction_id": "TXN-4",
            "account_number": "ACC-2001",
            "transaction_type": "PURCHASE",
            "amount": "420.10",
            "transaction_date": "2024-02-10T08:15:00",
            "channel": "ONLINE",
            "merchant_name": "Air Travel Co",
            "merchant_category": "TRAVEL",
        },
    ],
}


@pytest.fixture
def sample_banking_data() -> dict:
    return SAMPLE_BANKING_DATA


@pytest.fixture
def banking_dataset() -> BankingDataset:
    return BankingDataset.from_dict(SAMPLE_BANKING_DATA)


@pytest.fixture(scope="session")
def local_embedder() -> LocalEmbedder:
    """Default local embedder shared across tests (stateless)."""
    return LocalEmbedder(dimension=TestConstants.DEFAULT_EMBEDDING_DIMENSION)


@pytest.fixture
def openai_embeddings_api_mock():
    """Patch the OpenAI embeddings.create method."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def temp_vector_store(tmp_path) -> SQLiteVectorStore:
    """Create temporary SQLite vector store for testing."""
    return SQLiteVectorStore(
        tmp_path / "test_store.db",
        dimension=TestConstants.DEFAULT_EMBEDDING_DIMENSION,
    )


@pytest.fixture
def small_vector_store(tmp_path) -> SQLiteVectorStore:
    """SQLite store with a tiny dimension for hand-built vectors."""
    return SQLiteVectorStore(
        tmp_path / "small_store.db",
        dimension=TestConstants.SMALL_EMBEDDING_DIMENSION,
    )


@pytest.fixture
def small_faiss_store(tmp_path) -> FaissVectorStore:
    """FAISS store with a tiny dimension for hand-built vectors."""
    return FaissVectorStore(
        db_path=tmp_path / "faiss_meta.db",
        index_path=tmp_path / "faiss" / "index.faiss",
        dimension=TestConstants.SMALL_EMBEDDING_DIMENSION,
    )


@pytest.fixture
def document_factory():
    """Factory for embedded documents with hand-built vectors."""

    def _create(
        content: str,
        source_type: str,
        *hot: int,
        source_id: str | None = None,
        dimension: int = TestConstants.SMALL_EMBEDDING_DIMENSION,
    ) -> EmbeddedDocument:
        return EmbeddedDocument(
            content=content,
            source_type=source_type,
            source_id=source_id,
            embedding=unit_vector(dimension, *hot),
        )

    return _create


@pytest.fixture
def populated_small_store(small_vector_store, document_factory) -> SQLiteVectorStore:
    """Small store with one document of each source type plus a chat entry."""
    small_vector_store.batch_insert(
        [
            document_factory("Overdraft fees", "policy", 0, source_id="pol-1"),
            document_factory("Overdraft and wires", "policy", 0, 1, source_id="pol-2"),
            document_factory("Alice profile", "customer_profile", 2, source_id="C1"),
            document_factory("Checking summary", "account_summary", 3, source_id="A1"),
            document_factory("Spending pattern", "transaction_pattern", 4, source_id="A1"),
            document_factory("Earlier chat about overdraft", "chat", 0, source_id="s1"),
        ]
    )
    return small_vector_store


@pytest.fixture
def memory_conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def sqlite_conversation_store(tmp_path) -> SQLiteConversationStore:
    return SQLiteConversationStore(tmp_path / "chat.db")


@pytest.fixture
def rag_engine_factory(tmp_path, local_embedder):
    """Factory for RAGEngine instances wired with local components."""

    def _create_engine(
        *,
        store=None,
        generator=None,
        conversation_store=None,
        top_k: int = 5,
        similarity_threshold: float = 0.0,
        history_window: int = 6,
    ) -> RAGEngine:
        if store is None:
            store = SQLiteVectorStore(
                tmp_path / "engine.db", dimension=local_embedder.dimension
            )
        return RAGEngine(
            embedder=local_embedder,
            gateway=SimilaritySearchGateway(store),
            generator=generator or MockGenerator(),
            conversation_store=conversation_store or InMemoryConversationStore(),
            top_k=top_k,
            similarity_threshold=similarity_threshold,
            history_window=history_window,
        )

    return _create_engine
