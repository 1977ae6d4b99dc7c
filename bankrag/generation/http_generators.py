"""Generators that talk to plain JSON-over-HTTP backends (Gemini, Ollama)."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import httpx

from bankrag.config import config
from bankrag.exceptions import GenerationError
from bankrag.generation.base import Generator, combined_prompt, error_answer

logger = config.get_logger(__name__)


class HTTPGenerator(Generator):
    """Posts a JSON payload and extracts the answer from the JSON reply.

    Subclasses describe the request shape and where the answer lives in the
    response; transport, timeouts and error conversion are shared.
    """

    display_name = "HTTP backend"

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=self.timeout)

    @abstractmethod
    def _url(self) -> str:
        """Endpoint URL."""

    @abstractmethod
    def _payload(self, prompt: str) -> dict[str, Any]:
        """JSON request body."""

    def _params(self) -> dict[str, str]:  # noqa: PLR6301
        return {}

    @abstractmethod
    def _extract_answer(self, body: dict[str, Any]) -> str:
        """Answer text from a decoded response body."""

    def generate(self, system_prompt: str, user_query: str, context: str) -> str:
        """Send the combined prompt to the backend.

        Returns:
            The backend's answer, or an error-marked string on failure.
        """
        prompt = combined_prompt(system_prompt, user_query, context)
        try:
            response = self.client.post(
                self._url(),
                json=self._payload(prompt),
                params=self._params(),
                headers={"Content-Type": "application/json"},
            )
            if response.is_error:
                msg = (
                    f"{self.display_name} API error: "
                    f"{response.status_code} {response.text}"
                )
                raise GenerationError(msg)
            answer = self._extract_answer(response.json())
        except (httpx.HTTPError, ValueError, GenerationError) as exc:
            logger.exception("%s generation failed", self.display_name)
            return error_answer(str(exc), self.display_name)
        else:
            return answer

    def close(self) -> None:
        """Close the HTTP client unless it was supplied by the caller."""
        if self._owns_client:
            self.client.close()


class GeminiGenerator(HTTPGenerator):
    """Google Gemini ``generateContent`` backend."""

    provider = "gemini"
    display_name = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key or config.get_gemini_api_key()
        self.model = model or config.GEMINI_MODEL
        self.base_url = (base_url or config.GEMINI_BASE_URL).rstrip("/")

    def _url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _params(self) -> dict[str, str]:
        return {"key": self.api_key}

    def _payload(self, prompt: str) -> dict[str, Any]:  # noqa: PLR6301
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": config.LLM_TEMPERATURE,
                "maxOutputTokens": config.LLM_MAX_TOKENS,
            },
        }

    def _extract_answer(self, body: dict[str, Any]) -> str:  # noqa: PLR6301
        try:
            return str(body["candidates"][0]["content"]["parts"][0]["text"])
        except (KeyError, IndexError, TypeError) as exc:
            msg = "Unexpected Gemini response format"
            raise GenerationError(msg) from exc


class OllamaGenerator(HTTPGenerator):
    """Local Ollama ``/api/generate`` backend."""

    provider = "ollama"
    display_name = "Ollama"

    def __init__(
        self,
        url: str | None = None,
        model: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(client=client, timeout=timeout)
        self.url = (url or config.OLLAMA_URL).rstrip("/")
        self.model = model or config.OLLAMA_MODEL

    def _url(self) -> str:
        return f"{self.url}/api/generate"

    def _payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": config.LLM_TEMPERATURE},
        }

    def _extract_answer(self, body: dict[str, Any]) -> str:  # noqa: PLR6301
        try:
            return str(body["response"])
        except (KeyError, TypeError) as exc:
            msg = "Unexpected Ollama response format"
            raise GenerationError(msg) from exc
