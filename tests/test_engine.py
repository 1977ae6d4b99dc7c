"""Tests for RAGEngine, the end-to-end retrieval pipeline."""

import uuid
from unittest.mock import create_autospec

import pytest

from bankrag import (
    ERROR_MARKER,
    NO_RELEVANT_INFORMATION,
    DocumentIndexer,
    EmbeddedDocument,
    Generator,
    InvalidQueryError,
    OllamaGenerator,
    SQLiteVectorStore,
)
from bankrag.models import SNIPPET_LENGTH


class RecordingGenerator(Generator):
    """Generator that records the context it receives."""

    provider = "recording"

    def __init__(self, answer: str = "recorded answer") -> None:
        self.answer = answer
        self.calls: list[tuple[str, str, str]] = []

    def generate(self, system_prompt: str, user_query: str, context: str) -> str:
        self.calls.append((system_prompt, user_query, context))
        return self.answer


@pytest.fixture
def indexed_store(tmp_path, local_embedder, banking_dataset) -> SQLiteVectorStore:
    store = SQLiteVectorStore(tmp_path / "indexed.db", dimension=local_embedder.dimension)
    DocumentIndexer(store, local_embedder, dataset=banking_dataset).index_all()
    return store


def test_overdraft_query_retrieves_overdraft_policy(rag_engine_factory, indexed_store):
    engine = rag_engine_factory(store=indexed_store, top_k=1, similarity_threshold=0.0)

    response = engine.query("overdraft policy")

    assert response.documents_retrieved == 1
    assert response.sources[0].source_type == "policy"
    assert response.sources[0].source_id == "overdraft-policy"
    assert "Overdraft Protection Policy" in response.answer
    assert response.embedding_provider == "local"
    assert response.llm_provider == "mock"
    assert response.latency_ms >= 0


def test_single_policy_document_answers_fee_question(
    rag_engine_factory, local_embedder, tmp_path
):
    content = "Overdraft fee is $35 per occurrence."
    store = SQLiteVectorStore(tmp_path / "single.db", dimension=local_embedder.dimension)
    store.insert(
        EmbeddedDocument(
            content=content,
            source_type="POLICY",
            source_id="overdraft-policy",
            embedding=local_embedder.embed(content),
        )
    )
    engine = rag_engine_factory(store=store, top_k=1, similarity_threshold=0.0)

    response = engine.query("What is the overdraft fee?")

    assert response.documents_retrieved == 1
    assert response.sources[0].source_id == "overdraft-policy"
    assert response.sources[0].source_type == "policy"
    assert response.sources[0].similarity > 0


def test_source_type_filter_limits_sources(rag_engine_factory, indexed_store):
    engine = rag_engine_factory(store=indexed_store, top_k=3)

    response = engine.query("Alice Johnson", source_type="CUSTOMER_PROFILE")

    assert response.sources
    assert {source.source_type for source in response.sources} == {
        "customer_profile"
    }


def test_snippets_are_truncated(rag_engine_factory, indexed_store):
    engine = rag_engine_factory(store=indexed_store, top_k=1)

    response = engine.query("overdraft policy")

    snippet = response.sources[0].snippet
    assert len(snippet) == SNIPPET_LENGTH + 3
    assert snippet.endswith("...")


def test_missing_session_id_creates_new_session(rag_engine_factory):
    engine = rag_engine_factory()

    first = engine.query("hello", session_id=None)
    second = engine.query("hello", session_id="   ")

    uuid.UUID(first.session_id)
    assert first.session_id != second.session_id


def test_session_history_feeds_next_query(rag_engine_factory, memory_conversation_store):
    generator = RecordingGenerator()
    engine = rag_engine_factory(
        generator=generator, conversation_store=memory_conversation_store
    )

    first = engine.query("What is my checking balance?")
    engine.query("And my savings?", session_id=first.session_id)

    _, _, first_context = generator.calls[0]
    _, _, second_context = generator.calls[1]
    assert not first_context.startswith("Previous conversation:")
    assert second_context.startswith(
        "Previous conversation:\n"
        "USER: What is my checking balance?\n"
        "ASSISTANT: recorded answer\n"
    )
    turns = memory_conversation_store.recent_by_session(first.session_id, 10)
    assert [turn.role for turn in turns] == ["user", "assistant", "user", "assistant"]


def test_error_answers_are_still_persisted(
    rag_engine_factory, sqlite_conversation_store
):
    engine = rag_engine_factory(
        generator=RecordingGenerator(f"{ERROR_MARKER}: backend down"),
        conversation_store=sqlite_conversation_store,
    )

    response = engine.query("Any fraud alerts?", session_id="s-err")

    assert response.answer.startswith(ERROR_MARKER)
    turns = sqlite_conversation_store.recent_by_session("s-err", 10)
    assert [turn.content for turn in turns] == [
        "Any fraud alerts?",
        f"{ERROR_MARKER}: backend down",
    ]


@pytest.mark.parametrize("query", ["", "   ", None])
def test_empty_query_is_rejected(rag_engine_factory, memory_conversation_store, query):
    engine = rag_engine_factory(conversation_store=memory_conversation_store)

    with pytest.raises(InvalidQueryError):
        engine.query(query, session_id="s1")
    assert memory_conversation_store.recent_by_session("s1", 10) == []


def test_store_failure_degrades_to_no_information(rag_engine_factory):
    store = create_autospec(SQLiteVectorStore, instance=True)
    store.search.side_effect = RuntimeError("disk I/O error")
    generator = RecordingGenerator()
    engine = rag_engine_factory(store=store, generator=generator)

    response = engine.query("overdraft policy")

    assert response.sources == []
    assert response.documents_retrieved == 0
    assert generator.calls[0][2] == NO_RELEVANT_INFORMATION


def test_response_to_dict(rag_engine_factory, indexed_store):
    engine = rag_engine_factory(store=indexed_store, top_k=2)

    data = engine.query("wire transfer limits").to_dict()

    assert set(data) == {
        "answer",
        "session_id",
        "sources",
        "documents_retrieved",
        "latency_ms",
        "embedding_provider",
        "llm_provider",
    }
    assert set(data["sources"][0]) == {
        "source_type",
        "source_id",
        "similarity",
        "snippet",
    }


def test_debug_reports_probe(rag_engine_factory, indexed_store):
    engine = rag_engine_factory(store=indexed_store)

    info = engine.debug()

    assert info["embeddings"] == 17
    assert info["probe_total_dims"] == 384
    assert info["probe_non_zero_dims"] > 0
    assert info["probe_results_at_zero_threshold"] == 3
    assert info["probe_top_source_type"] == "policy"


def test_closing_engine_closes_generator_client(rag_engine_factory):
    generator = OllamaGenerator(url="http://ollama.test")

    with rag_engine_factory(generator=generator) as engine:
        assert engine.generator is generator

    assert generator.client.is_closed
