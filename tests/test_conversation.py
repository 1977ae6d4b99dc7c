"""Tests for the conversation stores."""

import pytest

from bankrag import ConversationTurn, SQLiteConversationStore


@pytest.fixture(params=["memory", "sqlite"])
def conversation_store(request, memory_conversation_store, sqlite_conversation_store):
    if request.param == "memory":
        return memory_conversation_store
    return sqlite_conversation_store


def add_turns(store, session_id: str, count: int) -> None:
    for i in range(count):
        role = "user" if i % 2 == 0 else "assistant"
        store.append(ConversationTurn(session_id=session_id, role=role, content=f"m{i}"))


def test_recent_turns_are_chronological(conversation_store):
    add_turns(conversation_store, "s1", 4)

    turns = conversation_store.recent_by_session("s1", 10)

    assert [turn.content for turn in turns] == ["m0", "m1", "m2", "m3"]
    assert [turn.role for turn in turns] == ["user", "assistant", "user", "assistant"]
    assert all(turn.created_at for turn in turns)


def test_recent_turns_respect_window(conversation_store):
    add_turns(conversation_store, "s1", 8)

    turns = conversation_store.recent_by_session("s1", 6)

    assert [turn.content for turn in turns] == ["m2", "m3", "m4", "m5", "m6", "m7"]


def test_sessions_are_isolated(conversation_store):
    add_turns(conversation_store, "s1", 2)
    add_turns(conversation_store, "s2", 3)

    assert len(conversation_store.recent_by_session("s1", 10)) == 2
    assert len(conversation_store.recent_by_session("s2", 10)) == 3
    assert conversation_store.recent_by_session("unknown", 10) == []


def test_zero_limit_returns_nothing(conversation_store):
    add_turns(conversation_store, "s1", 2)

    assert conversation_store.recent_by_session("s1", 0) == []


def test_sqlite_store_persists_across_instances(tmp_path):
    db_path = tmp_path / "chat.db"
    add_turns(SQLiteConversationStore(db_path), "s1", 3)

    reopened = SQLiteConversationStore(db_path)

    assert reopened.count() == 3
    assert reopened.count("s1") == 3
    assert [turn.content for turn in reopened.recent_by_session("s1", 2)] == [
        "m1",
        "m2",
    ]


def test_turn_rejects_unknown_role():
    with pytest.raises(ValueError, match="Unsupported conversation role"):
        ConversationTurn(session_id="s1", role="narrator", content="hi")


def test_turn_lowercases_role():
    assert ConversationTurn(session_id="s1", role="USER", content="hi").role == "user"
