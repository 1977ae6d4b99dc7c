"""Data models for the banking retrieval pipeline."""

from dataclasses import asdict, dataclass, field
from typing import Any

import numpy as np

CUSTOMER_PROFILE = "customer_profile"
ACCOUNT_SUMMARY = "account_summary"
TRANSACTION_PATTERN = "transaction_pattern"
POLICY = "policy"
CHAT = "chat"

SOURCE_TYPES = frozenset(
    {CUSTOMER_PROFILE, ACCOUNT_SUMMARY, TRANSACTION_PATTERN, POLICY, CHAT}
)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_SYSTEM = "system"
VALID_ROLES = frozenset({ROLE_USER, ROLE_ASSISTANT, ROLE_SYSTEM})

SNIPPET_LENGTH = 150


def normalize_source_type(source_type: str | None) -> str | None:
    """Lower-case and trim a source type tag.

    Returns:
        The normalized tag, or None when the input is missing or blank.
    """
    if source_type is None:
        return None
    normalized = source_type.strip().lower()
    return normalized or None


@dataclass
class EmbeddedDocument:
    """A retrievable unit of knowledge with its fingerprint."""

    content: str
    source_type: str
    source_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    embedding: np.ndarray | None = None

    def __post_init__(self) -> None:
        normalized = normalize_source_type(self.source_type)
        if normalized is None:
            msg = "source_type must be a non-empty string"
            raise ValueError(msg)
        self.source_type = normalized


@dataclass
class ConversationTurn:
    """Represents a single message in a session's history."""

    session_id: str
    role: str
    content: str
    created_at: str | None = None

    def __post_init__(self) -> None:
        self.role = self.role.lower()
        if self.role not in VALID_ROLES:
            msg = f"Unsupported conversation role: {self.role}"
            raise ValueError(msg)


@dataclass
class RankedResult:
    """A document paired with its similarity to the current query."""

    document: EmbeddedDocument
    similarity: float

    @property
    def content(self) -> str:
        return self.document.content

    @property
    def source_type(self) -> str:
        return self.document.source_type

    @property
    def source_id(self) -> str | None:
        return self.document.source_id


def snippet_of(content: str, limit: int = SNIPPET_LENGTH) -> str:
    """Shorten content to ``limit`` characters, marking the cut with an ellipsis.

    Returns:
        The original content, or its prefix followed by ``...``.
    """
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


@dataclass
class SourceReference:
    """A compact pointer to a document that informed an answer."""

    source_type: str
    source_id: str | None
    similarity: float
    snippet: str

    @classmethod
    def from_result(cls, result: RankedResult) -> "SourceReference":
        return cls(
            source_type=result.source_type,
            source_id=result.source_id,
            similarity=result.similarity,
            snippet=snippet_of(result.content),
        )


@dataclass
class QueryResponse:
    """Structured answer returned by the retrieval orchestrator."""

    answer: str
    session_id: str
    sources: list[SourceReference]
    documents_retrieved: int
    latency_ms: int
    embedding_provider: str
    llm_provider: str

    def to_dict(self) -> dict[str, Any]:
        """Convert the response to a JSON-serialisable mapping.

        Returns:
            Dictionary with the answer, session, sources and timing fields.
        """
        return asdict(self)


@dataclass
class IndexStats:
    """Counts produced by a bulk indexing pass."""

    profiles: int = 0
    accounts: int = 0
    patterns: int = 0
    policies: int = 0
    skipped: bool = False

    @property
    def total(self) -> int:
        return self.profiles + self.accounts + self.patterns + self.policies

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["total"] = self.total
        return data
