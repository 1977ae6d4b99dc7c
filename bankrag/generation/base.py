"""Shared interface for generation backends."""

from abc import ABC, abstractmethod

ERROR_MARKER = "Error generating response"


def error_answer(detail: str, backend: str | None = None) -> str:
    """Build an answer string that carries the error marker.

    Returns:
        Text starting with ``ERROR_MARKER``.
    """
    prefix = f"{ERROR_MARKER} with {backend}" if backend else ERROR_MARKER
    return f"{prefix}: {detail}"


def combined_prompt(system_prompt: str, user_query: str, context: str) -> str:
    """Join prompt, context and question for single-prompt backends.

    Returns:
        One prompt string.
    """
    return f"{system_prompt}\n\nContext:\n{context}\n\nUser Question: {user_query}"


class Generator(ABC):
    """Produces answer text from a system prompt, a user query and context.

    Remote implementations never raise for backend failures; they return an
    answer beginning with ``ERROR_MARKER`` instead.
    """

    provider: str = "base"

    @abstractmethod
    def generate(self, system_prompt: str, user_query: str, context: str) -> str:
        """Generate an answer."""

    def close(self) -> None:
        """Release network clients; local backends hold none."""

    def __enter__(self) -> "Generator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
