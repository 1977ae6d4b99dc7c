"""Fingerprint backends and factory."""

from __future__ import annotations

from typing import Literal

from bankrag.config import config

from .base import Embedder
from .local import LocalEmbedder, normalize_text, token_seed, tokenize
from .openai_embedder import OpenAIEmbedder

EmbeddingProvider = Literal["local", "openai"]


def get_embedder(
    provider: str | None = None,
    *,
    dimension: int | None = None,
    api_key: str | None = None,
    model: str | None = None,
) -> Embedder:
    """Return the configured embedding strategy.

    Raises:
        ValueError: If an unsupported provider is requested.
    """
    backend = (provider or config.EMBEDDING_PROVIDER).lower()

    if backend == "local":
        return LocalEmbedder(dimension=dimension)

    if backend == "openai":
        return OpenAIEmbedder(api_key=api_key, model=model, dimension=dimension)

    msg = f"Unsupported embedding provider: {provider}"
    raise ValueError(msg)


__all__ = [
    "Embedder",
    "EmbeddingProvider",
    "LocalEmbedder",
    "OpenAIEmbedder",
    "get_embedder",
    "normalize_text",
    "token_seed",
    "tokenize",
]
