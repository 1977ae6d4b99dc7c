"""Formatting generator that works without any backend."""

from bankrag.context import DOCUMENT_SEPARATOR
from bankrag.generation.base import Generator

FINDING_PREVIEW_LENGTH = 200
MOCK_DISCLAIMER = (
    "_Note: This is a mock response. Configure an LLM provider "
    "(OpenAI/Gemini/Ollama) for natural language answers._"
)


class MockGenerator(Generator):
    """Formats the retrieved context as a structured answer.

    Deterministic, so it doubles as a fixture for pipeline tests.
    """

    provider = "mock"

    def generate(self, system_prompt: str, user_query: str, context: str) -> str:  # noqa: ARG002
        """Echo each context chunk as a numbered finding.

        Returns:
            Markdown-formatted answer ending with the mock disclaimer.
        """
        lines = [
            "=== RAG Response (Mock LLM) ===\n\n",
            f"**Query:** {user_query}\n\n",
            "**Based on retrieved banking data:**\n\n",
        ]

        if not context or not context.strip():
            lines.append(
                "No relevant information found in the banking knowledge base.\n"
            )
        else:
            for i, raw_chunk in enumerate(context.split(DOCUMENT_SEPARATOR)):
                chunk = raw_chunk.strip()
                if not chunk:
                    continue
                if len(chunk) > FINDING_PREVIEW_LENGTH:
                    preview = chunk[:FINDING_PREVIEW_LENGTH] + "..."
                else:
                    preview = chunk
                lines.append(f"**Finding {i + 1}:** {preview}\n\n")

        lines.append(f"\n{MOCK_DISCLAIMER}")
        return "".join(lines)
