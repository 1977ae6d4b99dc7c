"""OpenAI embeddings backend."""

from __future__ import annotations

import numpy as np
from openai import OpenAI, OpenAIError

from bankrag.config import config
from bankrag.embeddings.base import Embedder
from bankrag.exceptions import EmbeddingError

logger = config.get_logger(__name__)


class OpenAIEmbedder(Embedder):
    """Handles OpenAI embeddings generation."""

    provider = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        dimension: int | None = None,
        batch_size: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the OpenAIEmbedder with OpenAI API key and model.

        Args:
            api_key: OpenAI API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
            dimension: Requested vector size. If None, uses
                config.EMBEDDING_DIMENSION.
            batch_size: Maximum number of texts per request. If None, uses
                config.EMBEDDING_BATCH_SIZE.
            timeout: Request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        super().__init__(dimension or config.EMBEDDING_DIMENSION)
        api_key = api_key or config.get_openai_api_key()
        self.client = OpenAI(
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
        )
        self.model = model or config.EMBEDDING_MODEL
        self.batch_size = max(1, batch_size or config.EMBEDDING_BATCH_SIZE)

    def _to_vector(self, values: list[float]) -> np.ndarray:
        vector = np.asarray(values, dtype=np.float32)
        if vector.shape[0] != self.dimension:
            msg = (
                f"Embedding dimension {vector.shape[0]} does not match "
                f"configured dimension {self.dimension}"
            )
            raise EmbeddingError(msg)
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector

    def embed(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Returns:
            np.ndarray: The unit-length embedding vector for the input text.

        Raises:
            EmbeddingError: If the OpenAI request fails.
        """
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=text,
                dimensions=self.dimension,
            )
        except OpenAIError as exc:
            logger.exception("Error generating embedding")
            msg = "Embedding generation failed"
            raise EmbeddingError(msg) from exc
        return self._to_vector(response.data[0].embedding)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Get embeddings for multiple texts in provider-sized chunks.

        Returns:
            list[np.ndarray]: List of embedding vectors for the input texts.

        Raises:
            EmbeddingError: If any batch request fails.
        """
        embeddings: list[np.ndarray] = []

        for i in range(0, len(texts), self.batch_size):
            batch_texts = texts[i : i + self.batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch_texts,
                    dimensions=self.dimension,
                )
            except OpenAIError as exc:
                logger.exception("Error generating batch embeddings")
                msg = "Batch embedding generation failed"
                raise EmbeddingError(msg) from exc
            embeddings.extend(self._to_vector(data.embedding) for data in response.data)
            logger.info("Generated embeddings for batch %d", i // self.batch_size + 1)

        return embeddings
