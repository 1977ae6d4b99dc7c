"""Retrieval orchestrator: embed, retrieve, assemble, generate, persist."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING, Any

from .config import config
from .context import ContextAssembler
from .conversation import ConversationStore, SQLiteConversationStore
from .embeddings import get_embedder
from .exceptions import InvalidQueryError
from .generation import get_generator
from .models import (
    ROLE_ASSISTANT,
    ROLE_USER,
    ConversationTurn,
    QueryResponse,
    SourceReference,
)
from .retrieval import SimilaritySearchGateway
from .vector_store import get_vector_store

if TYPE_CHECKING:
    from .embeddings import Embedder
    from .generation import Generator

logger = config.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a knowledgeable banking assistant with access to customer accounts, "
    "transaction data, and banking policies. Answer questions accurately based on "
    "the provided context. If the context doesn't contain enough information to "
    "answer fully, say so clearly. Always be helpful and professional.\n\n"
    "When discussing specific customers or accounts, reference them by their IDs. "
    "When discussing policies, cite the specific policy. For numerical data, be "
    "precise. If asked about trends, analyze the transaction patterns provided.\n\n"
    "Important: Never fabricate data. Only reference information present in the "
    "context below."
)

DEBUG_PROBE_QUERY = "overdraft policy"


class RAGEngine:
    """Runs one retrieval-augmented query per call.

    The pipeline holds no per-query state; the only thing carried between
    calls is the session id, whose history lives in the conversation store.
    """

    def __init__(  # noqa: PLR0913
        self,
        embedder: Embedder,
        gateway: SimilaritySearchGateway,
        generator: Generator,
        conversation_store: ConversationStore,
        *,
        top_k: int | None = None,
        similarity_threshold: float | None = None,
        history_window: int | None = None,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        """Wire the pipeline from explicit strategies.

        Args:
            embedder: Fingerprint backend used for the query.
            gateway: Similarity search over the document store.
            generator: Generation backend.
            conversation_store: Append-only session history.
            top_k: Maximum documents retrieved. If None, uses
                config.RETRIEVAL_TOP_K.
            similarity_threshold: Minimum similarity. If None, uses
                config.SIMILARITY_THRESHOLD.
            history_window: Number of recent turns shown to the generator. If
                None, uses config.CONVERSATION_WINDOW.
            system_prompt: Instructions passed to the generator.
        """
        self.embedder = embedder
        self.gateway = gateway
        self.generator = generator
        self.conversation_store = conversation_store
        self.top_k = top_k if top_k is not None else config.RETRIEVAL_TOP_K
        self.similarity_threshold = (
            similarity_threshold
            if similarity_threshold is not None
            else config.SIMILARITY_THRESHOLD
        )
        self.context_assembler = ContextAssembler(
            conversation_store,
            history_window=(
                history_window
                if history_window is not None
                else config.CONVERSATION_WINDOW
            ),
        )
        self.system_prompt = system_prompt

    def __enter__(self) -> RAGEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the generation backend's network client."""
        self.generator.close()

    @classmethod
    def from_config(cls) -> RAGEngine:
        """Build the engine with strategies chosen by configuration.

        Returns:
            A ready-to-use engine.
        """
        embedder = get_embedder()
        store = get_vector_store(dimension=embedder.dimension)
        store.load()
        logger.info(
            "Using %s embeddings, %s vector storage, %s generation",
            embedder.provider,
            store.backend,
            config.LLM_PROVIDER,
        )
        return cls(
            embedder=embedder,
            gateway=SimilaritySearchGateway(store),
            generator=get_generator(),
            conversation_store=SQLiteConversationStore(config.CONVERSATION_DB_PATH),
        )

    def query(
        self,
        user_query: str,
        session_id: str | None = None,
        source_type: str | None = None,
    ) -> QueryResponse:
        """Answer a question through the full retrieval pipeline.

        Args:
            user_query: The natural-language question.
            session_id: Existing session to continue; a new one is created when
                missing.
            source_type: Optional source-type filter for retrieval.

        Returns:
            Structured response with answer, sources and timing.

        Raises:
            InvalidQueryError: If the query is empty.
        """
        if user_query is None or not user_query.strip():
            msg = "Query must be a non-empty string"
            raise InvalidQueryError(msg)

        start_time = time.perf_counter()
        if session_id is None or not session_id.strip():
            session_id = str(uuid.uuid4())

        logger.info("RAG query [session=%s]: %s", session_id, user_query)

        query_embedding = self.embedder.embed(user_query)

        retrieved = self.gateway.search(
            query_embedding,
            top_k=self.top_k,
            threshold=self.similarity_threshold,
            source_type=source_type,
        )

        context = self.context_assembler.assemble(retrieved, session_id)

        answer = self.generator.generate(self.system_prompt, user_query, context)

        self.conversation_store.append(
            ConversationTurn(session_id=session_id, role=ROLE_USER, content=user_query)
        )
        self.conversation_store.append(
            ConversationTurn(session_id=session_id, role=ROLE_ASSISTANT, content=answer)
        )

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info("RAG response generated in %dms", latency_ms)

        return QueryResponse(
            answer=answer,
            session_id=session_id,
            sources=[SourceReference.from_result(result) for result in retrieved],
            documents_retrieved=len(retrieved),
            latency_ms=latency_ms,
            embedding_provider=self.embedder.provider,
            llm_provider=self.generator.provider,
        )

    def debug(self) -> dict[str, Any]:
        """Probe embedding and search with a fixed query at zero threshold.

        Returns:
            Diagnostic values describing the embedding and the top matches.
        """
        info: dict[str, Any] = {
            "embedding_provider": self.embedder.provider,
            "embedding_dimension": self.embedder.dimension,
            "llm_provider": self.generator.provider,
            "embeddings": self.gateway.store.count(),
        }

        probe = self.embedder.embed(DEBUG_PROBE_QUERY)
        info["probe_non_zero_dims"] = int((probe != 0).sum())
        info["probe_total_dims"] = int(probe.shape[0])

        results = self.gateway.search(probe, top_k=3, threshold=0.0)
        info["probe_results_at_zero_threshold"] = len(results)
        if results:
            top = results[0]
            info["probe_top_similarity"] = top.similarity
            info["probe_top_source_type"] = top.source_type
            info["probe_top_snippet"] = top.content[:100]
        return info
