"""Exceptions raised across the retrieval pipeline."""


class BankRAGError(Exception):
    """Base class for all BankRAG errors."""


class EmbeddingError(BankRAGError):
    """Raised when a fingerprint backend cannot embed the given text."""


class VectorStoreError(BankRAGError):
    """Raised when a document store is unreachable or in an unreadable state."""


class GenerationError(BankRAGError):
    """Raised inside a remote generator when the backend call fails."""


class InvalidQueryError(BankRAGError, ValueError):
    """Raised when a query is empty or malformed before the pipeline starts."""
