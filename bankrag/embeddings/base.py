"""Shared interface for fingerprint backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import numpy as np


class Embedder(ABC):
    """Turns text into fixed-dimension vectors.

    Subclasses set ``provider`` to the identifier reported back to callers in
    query responses.
    """

    provider: str = "base"

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            msg = f"Embedding dimension must be positive, got {dimension}"
            raise ValueError(msg)
        self.dimension = dimension

    @abstractmethod
    def embed(self, text: str) -> np.ndarray:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Embed several texts, preserving input order."""
