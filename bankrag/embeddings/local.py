"""Deterministic hash-projection embeddings that need no model or network."""

from __future__ import annotations

import hashlib
import re

import numpy as np

from bankrag.config import config
from bankrag.embeddings.base import Embedder

logger = config.get_logger(__name__)

LCG_MULTIPLIER = np.uint64(6364136223846793005)
LCG_INCREMENT = np.uint64(1442695040888963407)
LCG_SHIFT = np.uint64(33)
HALF_RANGE = 1073741823.0

UNIGRAM_WEIGHT = 1.0
IMPORTANT_UNIGRAM_WEIGHT = 2.0
BIGRAM_WEIGHT = 1.0
IMPORTANT_BIGRAM_WEIGHT = 3.0

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s.$%,]")
_WHITESPACE = re.compile(r"\s+")

# State names, postal abbreviations and city names that carry location intent.
IMPORTANT_TERMS = frozenset(
    {
        "ny", "ca", "tx", "fl", "il", "pa", "ohio", "ga", "nc", "mi",
        "nj", "va", "wa", "az", "ma", "tn", "in", "mo", "md", "wi",
        "york", "california", "texas", "florida", "illinois", "pennsylvania",
        "georgia", "carolina", "michigan", "jersey", "virginia", "washington",
        "arizona", "massachusetts", "tennessee", "indiana", "missouri",
        "maryland", "wisconsin",
        "chicago", "houston", "phoenix", "philadelphia", "antonio", "diego",
        "dallas", "jose", "austin", "jacksonville", "francisco", "columbus",
        "charlotte", "indianapolis", "seattle", "denver", "boston", "detroit",
        "nashville", "memphis", "portland", "vegas", "louisville", "baltimore",
        "milwaukee", "albuquerque", "tucson", "fresno", "mesa", "sacramento",
        "atlanta", "kansas", "miami", "oakland", "minneapolis", "tulsa",
        "cleveland", "wichita", "arlington", "worth",
    }
)  # fmt: skip

IMPORTANT_BIGRAMS = frozenset(
    {
        "new york", "new jersey", "new mexico", "new hampshire", "new orleans",
        "los angeles", "san francisco", "san diego", "san antonio", "san jose",
        "fort worth", "fort wayne", "salt lake", "el paso", "north carolina",
        "south carolina", "south dakota", "north dakota", "west virginia",
        "las vegas", "santa barbara", "santa cruz", "kansas city",
        "oklahoma city", "jersey city", "virginia beach",
    }
)  # fmt: skip


def normalize_text(text: str) -> str:
    """Lowercase text and keep only letters, digits, whitespace and ``.$%,``.

    Returns:
        Normalized text with single spaces between words.
    """
    lowered = text.lower()
    cleaned = _DISALLOWED_CHARS.sub(" ", lowered)
    return _WHITESPACE.sub(" ", cleaned).strip()


def tokenize(text: str) -> tuple[list[str], list[float]]:
    """Split text into weighted unigram and bigram tokens.

    Returns:
        Parallel lists of tokens and their weights.
    """
    words = [word for word in normalize_text(text).split(" ") if word]

    tokens: list[str] = []
    weights: list[float] = []

    for word in words:
        tokens.append(word)
        weights.append(
            IMPORTANT_UNIGRAM_WEIGHT if word in IMPORTANT_TERMS else UNIGRAM_WEIGHT
        )

    for first, second in zip(words, words[1:], strict=False):
        tokens.append(f"{first}_{second}")
        weights.append(
            IMPORTANT_BIGRAM_WEIGHT
            if f"{first} {second}" in IMPORTANT_BIGRAMS
            else BIGRAM_WEIGHT
        )

    return tokens, weights


def token_seed(token: str) -> int:
    """Derive a 64-bit seed from the first eight bytes of the token's SHA-256.

    Returns:
        Unsigned big-endian integer seed.
    """
    digest = hashlib.sha256(token.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


class LocalEmbedder(Embedder):
    """Seeded random-projection embeddings.

    Every token seeds a linear congruential generator that spreads a dense
    pseudo-random vector across all dimensions. Texts sharing tokens therefore
    share vector components, which gives lexical overlap a geometric meaning
    without a trained model. Location terms are boosted so location-bearing
    queries favour location-bearing documents.
    """

    provider = "local"

    def __init__(self, dimension: int | None = None) -> None:
        super().__init__(dimension or config.EMBEDDING_DIMENSION)

    def embed(self, text: str) -> np.ndarray:
        """Embed a single text.

        Returns:
            Unit-length float32 vector, or the zero vector for empty input.
        """
        tokens, weights = tokenize(text)
        vector = np.zeros(self.dimension, dtype=np.float64)
        if not tokens:
            return vector.astype(np.float32)

        states = np.array([token_seed(token) for token in tokens], dtype=np.uint64)
        weight_array = np.asarray(weights, dtype=np.float64)

        for dim in range(self.dimension):
            states = states * LCG_MULTIPLIER + LCG_INCREMENT
            upper = (states >> LCG_SHIFT).astype(np.float64)
            vector[dim] = np.dot(weight_array, (upper - HALF_RANGE) / HALF_RANGE)

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector.astype(np.float32)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Embed several texts.

        Returns:
            One vector per input text, in input order.
        """
        return [self.embed(text) for text in texts]
