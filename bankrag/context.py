"""Builds the bounded prompt context from retrieved documents and chat history."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import config

if TYPE_CHECKING:
    from .conversation import ConversationStore
    from .models import RankedResult

NO_RELEVANT_INFORMATION = "No relevant information found in the knowledge base."
DOCUMENT_SEPARATOR = "---\n"
DEFAULT_HISTORY_WINDOW = 6

logger = config.get_logger(__name__)


class ContextAssembler:
    """Merges ranked documents and recent conversation turns into one string.

    History is merged after retrieval so it informs generation without
    influencing which documents the query vector matches.
    """

    def __init__(
        self,
        conversation_store: ConversationStore,
        history_window: int = DEFAULT_HISTORY_WINDOW,
    ) -> None:
        self.conversation_store = conversation_store
        self.history_window = history_window

    @staticmethod
    def build_context(results: list[RankedResult]) -> str:
        """Render ranked documents in ranking order.

        Returns:
            Context text, or the no-relevant-information sentinel when empty.
        """
        if not results:
            return NO_RELEVANT_INFORMATION

        entries = [
            (
                f"[Source: {result.source_type} | ID: {result.source_id} | "
                f"Relevance: {result.similarity:.2f}]\n"
                f"{result.content}\n"
            )
            for result in results
        ]
        return DOCUMENT_SEPARATOR.join(entries)

    def build_conversation_context(self, session_id: str) -> str:
        """Render the recent turns of a session as ``ROLE: content`` lines.

        Returns:
            Chronological history text, or an empty string with no history.
        """
        turns = self.conversation_store.recent_by_session(
            session_id, self.history_window
        )
        return "".join(f"{turn.role.upper()}: {turn.content}\n" for turn in turns)

    def assemble(self, results: list[RankedResult], session_id: str) -> str:
        """Combine conversation history and document context.

        Returns:
            The full context handed to the generator.
        """
        document_context = self.build_context(results)
        conversation_context = self.build_conversation_context(session_id)
        if not conversation_context:
            return document_context
        return (
            "Previous conversation:\n"
            f"{conversation_context}\n\n"
            "Relevant data:\n"
            f"{document_context}"
        )
