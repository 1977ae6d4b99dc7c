"""Append-only conversation logs keyed by session id."""

from __future__ import annotations

import datetime
import sqlite3
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path

from .config import config
from .models import ConversationTurn

logger = config.get_logger(__name__)


def _utc_now() -> str:
    return datetime.datetime.now(tz=datetime.UTC).isoformat()


class ConversationStore(ABC):
    """Interface for the short-term conversation log."""

    @abstractmethod
    def append(self, turn: ConversationTurn) -> None:
        """Append a turn to its session."""

    @abstractmethod
    def recent_by_session(self, session_id: str, limit: int) -> list[ConversationTurn]:
        """Return the last ``limit`` turns of a session in chronological order."""


class InMemoryConversationStore(ConversationStore):
    """Process-local conversation log, useful for tests and one-off CLI runs."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[ConversationTurn]] = defaultdict(list)

    def append(self, turn: ConversationTurn) -> None:
        if turn.created_at is None:
            turn.created_at = _utc_now()
        self._sessions[turn.session_id].append(turn)

    def recent_by_session(self, session_id: str, limit: int) -> list[ConversationTurn]:
        if limit <= 0:
            return []
        return list(self._sessions.get(session_id, [])[-limit:])


class SQLiteConversationStore(ConversationStore):
    """Conversation log persisted in the ``chat_history`` SQLite table."""

    def __init__(self, db_path: Path = Path("data/bankrag.db")) -> None:
        """Initialize the store and ensure the table exists.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self._create_tables()

    def _create_tables(self) -> None:
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS chat_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    role TEXT NOT NULL CHECK(role IN ('user','assistant','system')),
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_chat_session ON chat_history(session_id)"
            )
            conn.commit()

    def append(self, turn: ConversationTurn) -> None:
        if turn.created_at is None:
            turn.created_at = _utc_now()
        with sqlite3.connect(str(self.db_path)) as conn:
            conn.execute(
                """
                INSERT INTO chat_history (session_id, role, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (turn.session_id, turn.role, turn.content, turn.created_at),
            )
            conn.commit()

    def recent_by_session(self, session_id: str, limit: int) -> list[ConversationTurn]:
        """Fetch the most recent turns of a session.

        Returns:
            Up to ``limit`` turns, oldest first.
        """
        if limit <= 0:
            return []
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT session_id, role, content, created_at
                FROM chat_history
                WHERE session_id = ?
                ORDER BY id DESC
                LIMIT ?
                """,
                (session_id, limit),
            )
            rows = cursor.fetchall()

        return [
            ConversationTurn(
                session_id=row[0], role=row[1], content=row[2], created_at=row[3]
            )
            for row in reversed(rows)
        ]

    def count(self, session_id: str | None = None) -> int:
        """Count stored turns, optionally for a single session.

        Returns:
            Number of matching rows.
        """
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()
            if session_id is None:
                cursor.execute("SELECT COUNT(*) FROM chat_history")
            else:
                cursor.execute(
                    "SELECT COUNT(*) FROM chat_history WHERE session_id = ?",
                    (session_id,),
                )
            return int(cursor.fetchone()[0])
