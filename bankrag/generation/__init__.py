"""Generation backends and factory."""

from __future__ import annotations

from typing import Literal

from bankrag.config import config

from .base import ERROR_MARKER, Generator, error_answer
from .http_generators import GeminiGenerator, HTTPGenerator, OllamaGenerator
from .mock import MockGenerator
from .openai_generator import OpenAIGenerator

LLMProvider = Literal["mock", "openai", "gemini", "ollama"]


def get_generator(provider: str | None = None) -> Generator:
    """Return the configured generation strategy.

    Raises:
        ValueError: If an unsupported provider is requested.
    """
    backend = (provider or config.LLM_PROVIDER).lower()

    if backend == "mock":
        return MockGenerator()
    if backend == "openai":
        return OpenAIGenerator()
    if backend == "gemini":
        return GeminiGenerator()
    if backend == "ollama":
        return OllamaGenerator()

    msg = f"Unsupported LLM provider: {provider}"
    raise ValueError(msg)


__all__ = [
    "ERROR_MARKER",
    "GeminiGenerator",
    "Generator",
    "HTTPGenerator",
    "LLMProvider",
    "MockGenerator",
    "OllamaGenerator",
    "OpenAIGenerator",
    "error_answer",
    "get_generator",
]
