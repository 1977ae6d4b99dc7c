"""BankRAG - retrieval-augmented question answering over banking data."""

from .banking import Account, BankingDataset, Customer, Transaction
from .context import NO_RELEVANT_INFORMATION, ContextAssembler
from .conversation import (
    ConversationStore,
    InMemoryConversationStore,
    SQLiteConversationStore,
)
from .document_processing import DocumentLoader, TextChunker
from .embeddings import Embedder, LocalEmbedder, OpenAIEmbedder, get_embedder
from .engine import RAGEngine
from .exceptions import (
    BankRAGError,
    EmbeddingError,
    GenerationError,
    InvalidQueryError,
    VectorStoreError,
)
from .generation import (
    ERROR_MARKER,
    GeminiGenerator,
    Generator,
    MockGenerator,
    OllamaGenerator,
    OpenAIGenerator,
    get_generator,
)
from .indexer import DocumentIndexer
from .models import (
    ConversationTurn,
    EmbeddedDocument,
    IndexStats,
    QueryResponse,
    RankedResult,
    SourceReference,
)
from .retrieval import SimilaritySearchGateway
from .vector_store import FaissVectorStore, SQLiteVectorStore, get_vector_store

__all__ = [
    "ERROR_MARKER",
    "NO_RELEVANT_INFORMATION",
    "Account",
    "BankRAGError",
    "BankingDataset",
    "ContextAssembler",
    "ConversationStore",
    "ConversationTurn",
    "Customer",
    "DocumentIndexer",
    "DocumentLoader",
    "EmbeddedDocument",
    "Embedder",
    "EmbeddingError",
    "FaissVectorStore",
    "GeminiGenerator",
    "GenerationError",
    "Generator",
    "InMemoryConversationStore",
    "IndexStats",
    "InvalidQueryError",
    "LocalEmbedder",
    "MockGenerator",
    "OllamaGenerator",
    "OpenAIEmbedder",
    "OpenAIGenerator",
    "QueryResponse",
    "RAGEngine",
    "RankedResult",
    "SQLiteConversationStore",
    "SQLiteVectorStore",
    "SimilaritySearchGateway",
    "SourceReference",
    "TextChunker",
    "Transaction",
    "VectorStoreError",
    "get_embedder",
    "get_generator",
    "get_vector_store",
]
